"""Extension layer — handler plugins via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from cqbus.plugins.hookspecs import hookimpl
from cqbus.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
