"""Agent-callable spreadsheet tools.

Importing this package registers ``excel_describe``, ``excel_read``,
``excel_write``, ``excel_add_rows`` and ``excel_create``.
"""

from xltools.tools import excel  # noqa: F401
from xltools.tools.base import (
    ToolResult,
    ToolRuntime,
    ToolSpec,
    UnknownToolError,
    execute_tool,
    get_tool,
    list_tools,
)

__all__ = [
    "ToolResult",
    "ToolRuntime",
    "ToolSpec",
    "UnknownToolError",
    "execute_tool",
    "get_tool",
    "list_tools",
]
