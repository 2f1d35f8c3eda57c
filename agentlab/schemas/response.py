"""Schemas for tool results and agent chat responses."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from agentlab.schemas.documents import NodeWithScore


class ToolOutput(BaseModel):
    """Result of one tool invocation during a chat turn."""

    tool_name: str
    tool_call_id: str = ""
    arguments: dict[str, Any] = Field(default_factory=dict)
    content: str = ""
    is_error: bool = False


class ReasoningStep(BaseModel):
    """One step of a ReAct trace (local-model mode)."""

    type: Literal["action", "observation", "response"]
    thought: str = ""
    action: str | None = None
    action_input: dict[str, Any] | None = None
    observation: str | None = None
    response: str | None = None
    is_error: bool = False


class AgentChatResponse(BaseModel):
    """Final answer of a chat turn plus the tool calls that produced it."""

    response: str = Field(..., description="Final textual answer.")
    sources: list[ToolOutput] = Field(default_factory=list, description="Tool invocations made during the turn.")
    raw: list[ReasoningStep] | None = Field(None, description="ReAct trace (local-model mode only).")

    def __str__(self) -> str:
        return self.response


class QueryResponse(BaseModel):
    """Answer synthesized by a query engine from retrieved chunks."""

    response: str
    source_nodes: list[NodeWithScore] = Field(default_factory=list)

    def __str__(self) -> str:
        return self.response
