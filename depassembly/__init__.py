"""depassembly - dependency-set resolution and placement for assembly archives.

Resolves a project's dependency graph, filters it through ordered
dependency-set rules, and places each artifact into a zip, tar or
directory archive.
"""

__version__ = "0.1.0"
__author__ = "depassembly Contributors"

from depassembly.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
