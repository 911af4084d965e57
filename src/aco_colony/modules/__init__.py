from .pheromone import MIN_PHEROMONE, PheromoneField

__all__ = [
    "MIN_PHEROMONE",
    "PheromoneField",
]
