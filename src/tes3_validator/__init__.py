"""
tes3-validator: content linter for Morrowind mod files

Checks decoded plugin records against the conventions of the Tamriel
Rebuilt family of projects and reports one line per issue found.
"""

__version__ = "0.1.0"
__author__ = "tes3-validator Contributors"

# Core run components
from .context import Context, Mode, Project
from .diagnostics import Reporter
from .handlers import Handler, HandlerRegistry, RunOptions, build_registry
from .traversal import Traversal, TraversalError, validate

# Services
from .plugins import PluginFile, PluginFileLoader, PluginLoadError, PluginService
from .utils.logging_config import setup_logging

__all__ = [
    # Run
    "Context",
    "Mode",
    "Project",
    "Reporter",
    "Handler",
    "HandlerRegistry",
    "RunOptions",
    "build_registry",
    "Traversal",
    "TraversalError",
    "validate",
    # Services
    "PluginFile",
    "PluginFileLoader",
    "PluginLoadError",
    "PluginService",
    # Logging
    "setup_logging",
]
