"""stdio server mode: JSON line-delimited tool calls over stdin/stdout.

Request:  ``{"id": "1", "tool": "excel_read", "arguments": {"path": "data.xlsx"}}``
Response: ``{"id": "1", "ok": true, "content": "...", "details": {...}}``

``{"id": "2", "tool": "list_tools"}`` returns the tool catalogue. Workbooks are
re-read on every request; no state is kept between calls.
"""

from __future__ import annotations

import json
import sys
from typing import IO, Any

from xltools.engine.dispatcher import error_code_for, error_details_for
from xltools.tools import ToolRuntime, execute_tool, list_tools


class StdioServer:
    """Simple JSON-RPC-like server over stdin/stdout."""

    def __init__(self, runtime: ToolRuntime | None = None) -> None:
        self.runtime = runtime or ToolRuntime()

    def handle_request(self, request: dict[str, Any]) -> dict[str, Any]:
        req_id = request.get("id", "")
        tool = request.get("tool", "")
        arguments = request.get("arguments") or {}

        if not tool:
            return _error(req_id, "ERR_MISSING_PARAM", "Missing 'tool' in request")
        if tool == "list_tools":
            return {"id": req_id, "ok": True, "details": {"tools": [t.describe() for t in list_tools()]}}
        if not isinstance(arguments, dict):
            return _error(req_id, "ERR_INVALID_ARGUMENT", "'arguments' must be an object")

        try:
            result = execute_tool(tool, arguments, self.runtime)
        except Exception as e:
            return _error(req_id, error_code_for(e), str(e), error_details_for(e))
        return {"id": req_id, "ok": True, **result.to_dict()}

    def run(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        """Main server loop: read JSON lines from stdin, write responses to stdout."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                response = _error("", "ERR_INVALID_ARGUMENT", f"Invalid JSON: {e}")
            else:
                if isinstance(request, dict):
                    response = self.handle_request(request)
                else:
                    response = _error("", "ERR_INVALID_ARGUMENT", "Request must be a JSON object")
            stdout.write(json.dumps(response, default=str) + "\n")
            stdout.flush()


def _error(req_id: Any, code: str, message: str, details: dict | None = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"id": req_id, "ok": False, "error": error}
