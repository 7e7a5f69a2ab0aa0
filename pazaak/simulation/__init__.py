"""
Headless simulation and result statistics for Pazaak.
"""

from pazaak.simulation.statistics import (
    ConfidenceInterval,
    SimulationStatistics,
    calculate_confidence_interval,
    summarize,
)

__all__ = [
    "ConfidenceInterval",
    "SimulationStatistics",
    "calculate_confidence_interval",
    "summarize",
]
