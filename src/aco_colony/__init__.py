"""
ACO Path Search Package

完全グラフ上でスタートからゴールへの短い経路を探索するACO（Ant System）パッケージ
"""

__version__ = "1.0.0"

from .algorithms.colony_engine import ColonyIterationEngine, IterationResult
from .algorithms.path_constructor import PathConstructor
from .config import ColonyConfig, load_colony_config, load_config
from .core.ant import Ant
from .core.graph import CompleteGraph
from .core.random_source import DeterministicRandom
from .modules.pheromone import MIN_PHEROMONE, PheromoneField
from .simulation.controller import SimulationController, SimulationState
from .utils.metrics import MetricsCalculator
from .utils.visualization import Visualizer

__all__ = [
    "ColonyIterationEngine",
    "IterationResult",
    "PathConstructor",
    "ColonyConfig",
    "load_config",
    "load_colony_config",
    "Ant",
    "CompleteGraph",
    "DeterministicRandom",
    "MIN_PHEROMONE",
    "PheromoneField",
    "SimulationController",
    "SimulationState",
    "MetricsCalculator",
    "Visualizer",
]
