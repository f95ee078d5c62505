"""Task Ledger MCP - per-user tasks, projects and tags.

Hierarchical task management with maintained project and tag counters, served
over the MCP protocol.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
