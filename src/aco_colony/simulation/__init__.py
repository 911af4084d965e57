from .controller import SimulationController, SimulationState

__all__ = [
    "SimulationController",
    "SimulationState",
]
