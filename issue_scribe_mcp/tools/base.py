"""Shared machinery for GitHub MCP tools.

Each tool declares its arguments as a pydantic model. The same model produces
the advertised ``inputSchema`` and validates incoming arguments, so a call
never reaches GitHub unless it satisfies the schema the client was shown.
"""

import json
from typing import Annotated, Any, Dict, Optional, Type

import structlog
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.json_schema import GenerateJsonSchema

from ..config import MCPConfig
from ..github.client import GitHubClient
from .errors import ToolValidationError, error_result

logger = structlog.get_logger(__name__)

NonEmptyStr = Annotated[str, Field(min_length=1)]
Identifier = Annotated[int, Field(ge=0)]
PerPage = Annotated[int, Field(ge=1, le=100)]


class ToolInputSchema(GenerateJsonSchema):
    """JSON schema flavour used for tool descriptors.

    Optional fields are advertised with their plain type: leaving a field out
    is how a caller leaves it unset.
    """

    def nullable_schema(self, schema):
        return self.generate_inner(schema["schema"])

    def default_schema(self, schema):
        if schema.get("default") is None:
            return self.generate_inner(schema["schema"])
        return super().default_schema(schema)

    def field_title_should_be_set(self, schema) -> bool:
        return False


class ToolArguments(BaseModel):
    """Base class for validated tool arguments."""

    model_config = ConfigDict(strict=True, extra="ignore")

    @classmethod
    def input_schema(cls) -> Dict[str, Any]:
        schema = cls.model_json_schema(schema_generator=ToolInputSchema)
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("required", [])
        return schema


class RepositoryArguments(ToolArguments):
    owner: NonEmptyStr = Field(description="Repository owner")
    repo: NonEmptyStr = Field(description="Repository name")


def success_result(payload: Dict[str, Any]) -> CallToolResult:
    """Wrap a projected payload into a successful result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
        isError=False
    )


class GitHubTool:
    """Base class for a single MCP tool backed by the GitHub API."""

    name: str = ""
    description: str = ""
    arguments_model: Type[ToolArguments] = RepositoryArguments

    def __init__(self, client: GitHubClient, config: Optional[MCPConfig] = None):
        """Initialize the tool.

        Args:
            client: Shared GitHub client
            config: MCP configuration (page size defaults)
        """
        self.client = client
        self.config = config or MCPConfig()

    def get_tool_definition(self) -> Tool:
        """Get the MCP tool definition."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.arguments_model.input_schema()
        )

    def validate(self, arguments: Any) -> ToolArguments:
        """Validate raw arguments against the tool's model.

        Raises:
            ToolValidationError: If any field is missing, mistyped or out of range
        """
        try:
            return self.arguments_model.model_validate({} if arguments is None else arguments)
        except ValidationError as e:
            raise ToolValidationError.from_pydantic(self.name, e) from e

    async def execute(self, arguments: Any) -> CallToolResult:
        """Validate, run and wrap one invocation of the tool."""
        logger.info("Executing tool", tool=self.name)
        try:
            validated = self.validate(arguments)
            payload = await self.run(validated)
        except Exception as e:
            detail = self.failure_detail(arguments)
            logger.error("Tool invocation failed", tool=self.name, detail=detail,
                         error=str(e), status=getattr(e, "status", None))
            return error_result(e, detail)
        return success_result(payload)

    def page_size(self, per_page: Optional[int]) -> int:
        return per_page if per_page is not None else self.config.default_per_page

    async def run(self, args: Any) -> Dict[str, Any]:
        """Perform the GitHub calls and project the result."""
        raise NotImplementedError

    def failure_detail(self, arguments: Any) -> str:
        """Describe the failed operation from the raw (possibly invalid) arguments."""
        raise NotImplementedError
