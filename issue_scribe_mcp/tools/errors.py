"""Error normalization for tool invocations."""

import json
from typing import Any, Dict, List, Mapping

from mcp.types import CallToolResult, TextContent
from pydantic import ValidationError

UNKNOWN = "unknown"


class ToolValidationError(ValueError):
    """Raised when tool arguments do not satisfy the tool's schema."""

    def __init__(self, tool_name: str, problems: List[str]):
        self.tool_name = tool_name
        self.problems = problems
        super().__init__(f"Invalid arguments for {tool_name}: " + "; ".join(problems))

    @classmethod
    def from_pydantic(cls, tool_name: str, error: ValidationError) -> "ToolValidationError":
        problems = []
        for item in error.errors():
            location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
            message = item.get("msg", "invalid value")
            # Model-level checks are reported by pydantic as "Value error, <text>"
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            problems.append(f"{location}: {message}")
        return cls(tool_name, problems)


class UnknownToolError(ValueError):
    """Raised when an invocation names a tool that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


def argument_or_unknown(arguments: Any, key: str) -> Any:
    """Read an identifying argument without ever failing.

    Returns the literal ``"unknown"`` when the arguments are not a mapping or
    the key is missing or null.
    """
    if not isinstance(arguments, Mapping):
        return UNKNOWN
    value = arguments.get(key)
    return UNKNOWN if value is None else value


def repository_of(arguments: Any) -> str:
    """Format ``owner/repo`` from raw arguments."""
    return f"{argument_or_unknown(arguments, 'owner')}/{argument_or_unknown(arguments, 'repo')}"


def error_payload(error: Exception, detail: str) -> Dict[str, Any]:
    """Build the JSON body of an error result."""
    payload: Dict[str, Any] = {"error": getattr(error, "message", None) or str(error)}
    status = getattr(error, "status", None)
    if status is not None:
        payload["status"] = status
    payload["detail"] = detail
    return payload


def error_result(error: Exception, detail: str) -> CallToolResult:
    """Wrap a failure into an ``isError`` result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error_payload(error, detail), indent=2))],
        isError=True
    )
