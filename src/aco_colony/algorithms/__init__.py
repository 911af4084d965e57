from .colony_engine import ColonyIterationEngine, IterationResult
from .path_constructor import PathConstructor

__all__ = [
    "ColonyIterationEngine",
    "IterationResult",
    "PathConstructor",
]
