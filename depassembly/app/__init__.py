"""Application layer for depassembly.

This layer orchestrates resolution, filtering, and placement without direct
repository or archive I/O. All side effects are delegated to adapters via
port interfaces.
"""

__all__ = [
    "AssemblyReport",
    "AssemblyService",
    "AssemblyTask",
    "DependencySetResolver",
    "PlacementPlanner",
    "RepositoryContext",
    "RuleOutcome",
    "RuleResolution",
]

from depassembly.app.assembly_service import AssemblyReport, AssemblyService, RuleResolution
from depassembly.app.assembly_task import AssemblyTask, RepositoryContext, RuleOutcome
from depassembly.app.dependency_sets import DependencySetResolver
from depassembly.app.placement import PlacementPlanner
