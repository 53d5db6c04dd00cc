"""
smell_factory.py

Provides a centralized factory for creating Smell values, ensuring a
consistent structure for every architectural issue the engine reports.
"""

from typing import Sequence

from .config import SMELL_CYCLE, SMELL_GOD_COMPONENT
from .models import Smell

def create_smell(
    smell_type: str,
    severity: int,
    description: str,
    files: Sequence[str]
) -> Smell:
    """
    Creates a standardized, immutable Smell.

    Args:
        smell_type (str): 'CYCLE' or 'GOD_COMPONENT'.
        severity (int): Non-negative severity of the smell.
        description (str): A human-readable description.
        files (Sequence[str]): The implicated FileIds.

    Returns:
        Smell: The smell value.
    """
    if smell_type not in (SMELL_CYCLE, SMELL_GOD_COMPONENT):
        raise ValueError(f"Unknown smell type: {smell_type}")
    if severity < 0:
        raise ValueError(f"Smell severity must be >= 0, got {severity}")
    return Smell(smell_type, int(severity), description, tuple(files))

def create_cycle_smell(cycle: Sequence[str], weight: int) -> Smell:
    return create_smell(
        smell_type=SMELL_CYCLE,
        severity=weight,
        description=f"Circular dependency detected: {' -> '.join(cycle)}",
        files=cycle
    )

def create_god_component_smell(file_id: str, lines: int, dependencies: int, weight: int) -> Smell:
    return create_smell(
        smell_type=SMELL_GOD_COMPONENT,
        severity=weight,
        description=f"God Component detected: {file_id} ({lines} loc, {dependencies} deps)",
        files=[file_id]
    )
