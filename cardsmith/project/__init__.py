"""
Project - Persisted project records and loading them into games.
"""

from .schemas import (
    CardDocument,
    ZoneTemplate,
    DealingRules,
    InitialSetup,
    GameConfiguration,
    RuleStepDocument,
    RuleDocument,
    RuleGraph,
    ProjectRecord,
)
from .loader import LoadedProject, build_game, project_rules
from .store import ProjectStore, InMemoryProjectStore

__all__ = [
    "CardDocument",
    "ZoneTemplate",
    "DealingRules",
    "InitialSetup",
    "GameConfiguration",
    "RuleStepDocument",
    "RuleDocument",
    "RuleGraph",
    "ProjectRecord",
    "LoadedProject",
    "build_game",
    "project_rules",
    "ProjectStore",
    "InMemoryProjectStore",
]
