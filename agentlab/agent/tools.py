"""
Agent tools: descriptors plus execution for tool-calling (agentic) mode.

FunctionTool wraps a plain callable; QueryEngineTool wraps a query engine.
call_tool runs one tool call and emits llm-tool-call / llm-tool-result.
"""

import logging
import math
from typing import Any, Callable, Protocol

from agentlab.core.callbacks import LLM_TOOL_CALL, LLM_TOOL_RESULT, CallbackManager
from agentlab.schemas.response import ToolOutput
from agentlab.schemas.tool import ParameterProperty, ParametersSchema, ToolMetadata

logger = logging.getLogger(__name__)

# Query-engine tools take a single free-text query
QUERY_PARAMETERS = ParametersSchema(
    properties={"input": ParameterProperty(type="string", description="Natural language query")},
    required=["input"],
)


class BaseTool(Protocol):
    metadata: ToolMetadata

    def call(self, arguments: dict[str, Any]) -> ToolOutput: ...


class FunctionTool:
    """A callable taking keyword arguments, described by ToolMetadata."""

    def __init__(self, fn: Callable[..., Any], metadata: ToolMetadata) -> None:
        self.fn = fn
        self.metadata = metadata

    @classmethod
    def from_defaults(
        cls,
        fn: Callable[..., Any],
        name: str | None = None,
        description: str | None = None,
        parameters: ParametersSchema | dict[str, Any] | None = None,
    ) -> "FunctionTool":
        if isinstance(parameters, dict):
            parameters = ParametersSchema.model_validate(parameters)
        metadata = ToolMetadata(
            name=name or fn.__name__,
            description=description or (fn.__doc__ or "").strip() or fn.__name__,
            parameters=parameters,
        )
        return cls(fn, metadata)

    def call(self, arguments: dict[str, Any]) -> ToolOutput:
        result = self.fn(**arguments)
        return ToolOutput(tool_name=self.metadata.name, arguments=arguments, content=str(result))


class QueryEngineTool:
    """Exposes a query engine (retrieve + synthesize) as a tool."""

    def __init__(self, query_engine: Any, metadata: ToolMetadata) -> None:
        self.query_engine = query_engine
        if metadata.parameters is None:
            metadata = metadata.model_copy(update={"parameters": QUERY_PARAMETERS})
        self.metadata = metadata

    def call(self, arguments: dict[str, Any]) -> ToolOutput:
        query = str(arguments.get("input") or "").strip()
        if not query:
            # Models sometimes pick their own key name for the single argument
            query = " ".join(str(v) for v in arguments.values()).strip()
        if not query:
            return ToolOutput(
                tool_name=self.metadata.name,
                arguments=arguments,
                content="Error: input is required.",
                is_error=True,
            )
        response = self.query_engine.query(query)
        return ToolOutput(tool_name=self.metadata.name, arguments=arguments, content=str(response))


def _format_number(value: float | int) -> str:
    if isinstance(value, float) and math.isnan(value):
        return "NaN"
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def sum_numbers(a: float, b: float) -> str:
    """Sum two numbers; integral results print without a fractional part."""
    return _format_number(a + b)


def sum_numbers_tool() -> FunctionTool:
    return FunctionTool.from_defaults(
        sum_numbers,
        name="sumNumbers",
        description="Use this function to sum two numbers",
        parameters={
            "type": "object",
            "properties": {
                "a": {"type": "number", "description": "First number to sum"},
                "b": {"type": "number", "description": "Second number to sum"},
            },
            "required": ["a", "b"],
        },
    )


def index_tools(tools: list[BaseTool]) -> dict[str, BaseTool]:
    """Map tool name -> tool; names must be unique within a tool set."""
    by_name: dict[str, BaseTool] = {}
    for tool in tools:
        name = tool.metadata.name
        if name in by_name:
            raise ValueError(f"Duplicate tool name: {name}")
        by_name[name] = tool
    return by_name


def call_tool(
    tools: dict[str, BaseTool],
    name: str,
    arguments: dict[str, Any],
    tool_call_id: str,
    callback_manager: CallbackManager,
) -> ToolOutput:
    """
    Execute one tool call. Unknown tools and exceptions raised by the tool are
    returned as is_error outputs so the model can see what went wrong.
    """
    args = arguments or {}
    logger.info("[tools] call_tool name=%r arguments=%r", name, args)
    tool_call = {"id": tool_call_id, "name": name, "input": args}
    callback_manager.dispatch(LLM_TOOL_CALL, {"tool_call": tool_call})

    tool = tools.get(name)
    if tool is None:
        output = ToolOutput(tool_name=name, arguments=args, content=f"Unknown tool: {name}", is_error=True)
    else:
        try:
            output = tool.call(args)
        except Exception as e:
            logger.warning("[tools] %s failed: %s", name, e)
            output = ToolOutput(tool_name=name, arguments=args, content=f"Error: {e}", is_error=True)
    output = output.model_copy(update={"tool_call_id": tool_call_id})

    callback_manager.dispatch(
        LLM_TOOL_RESULT,
        {
            "tool_call": tool_call,
            "tool_result": {"output": output.content, "is_error": output.is_error},
        },
    )
    logger.info("[tools] call_tool name=%r is_error=%s content_len=%d", name, output.is_error, len(output.content))
    return output
