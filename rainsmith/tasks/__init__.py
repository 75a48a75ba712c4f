"""Layer 3: Tasks - User intent translation.

Tasks translate user intent into object creation and primitive calls.
Tasks must not import plotting libraries.
"""

from rainsmith.tasks.deviationtask import DeviationReport, DeviationTask

__all__ = [
    "DeviationReport",
    "DeviationTask",
]
