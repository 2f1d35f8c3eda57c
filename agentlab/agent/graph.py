"""
LangGraph agents: call_model → (call_tools → call_model)* → END.

GraphAgent owns the loop, chat history and agent/LLM events. OpenAIAgent fills
the nodes with OpenAI function calling; ReActAgent (agent/react.py) fills them
with a text protocol for local models.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Literal, TypedDict

from langgraph.graph import END, StateGraph

from agentlab.agent.llm import ChatResult
from agentlab.agent.tools import BaseTool, call_tool, index_tools
from agentlab.core.callbacks import AGENT_END, AGENT_START, LLM_END, LLM_START, CallbackManager
from agentlab.core.config import MAX_AGENTIC_ROUNDS
from agentlab.core.settings import Settings
from agentlab.schemas.response import AgentChatResponse, ReasoningStep, ToolOutput

logger = logging.getLogger(__name__)

ROUND_LIMIT_ANSWER = "I couldn't complete the request within the tool-call limit."


class AgentState(TypedDict):
    messages: list  # chat messages sent to the model
    pending_tool_calls: list  # [{"id", "name", "arguments"}]
    sources: list  # ToolOutput per tool invocation this turn
    steps: list  # ReasoningStep (ReAct only)
    answer: str
    rounds: int


class GraphAgent(ABC):
    """Tool-using agent whose reasoning loop is a compiled LangGraph."""

    def __init__(
        self,
        tools: list[BaseTool],
        llm: Any = None,
        callback_manager: CallbackManager | None = None,
        max_rounds: int = MAX_AGENTIC_ROUNDS,
    ) -> None:
        self.tools = index_tools(list(tools))
        self.llm = llm if llm is not None else Settings.require_llm()
        self.callback_manager = callback_manager if callback_manager is not None else Settings.callback_manager
        self.max_rounds = max_rounds
        self.chat_history: list[dict[str, Any]] = []
        self._graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(AgentState)

        graph.add_node("call_model", self._call_model)
        graph.add_node("call_tools", self._call_tools)

        graph.set_entry_point("call_model")
        graph.add_conditional_edges("call_model", self._route_after_model)
        graph.add_edge("call_tools", "call_model")

        return graph.compile()

    def _route_after_model(self, state: AgentState) -> Literal["call_tools", "__end__"]:
        pending = state.get("pending_tool_calls") or []
        next_node = "call_tools" if pending else END
        logger.info("[graph:route_after_model] pending=%d rounds=%d -> %s", len(pending), state.get("rounds") or 0, next_node)
        return next_node

    def _run_model(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> ChatResult:
        self.callback_manager.dispatch(LLM_START, {"messages": len(messages)})
        result = self.llm.chat(messages, tools=tools)
        self.callback_manager.dispatch(
            LLM_END,
            {"content": result.content, "tool_calls": [tc["name"] for tc in result.tool_calls]},
        )
        return result

    def _system_messages(self) -> list[dict[str, Any]]:
        return []

    @abstractmethod
    def _call_model(self, state: AgentState) -> dict:
        """Ask the model for the next step; sets pending_tool_calls or answer."""

    @abstractmethod
    def _call_tools(self, state: AgentState) -> dict:
        """Run pending_tool_calls and append their results to messages."""

    def _remember(self, message: str, final: AgentState) -> None:
        self.chat_history.append({"role": "user", "content": message})
        self.chat_history.append({"role": "assistant", "content": final.get("answer") or ""})

    def _trace(self, final: AgentState) -> list[ReasoningStep] | None:
        return None

    def reset(self) -> None:
        self.chat_history = []

    async def chat(self, message: str) -> AgentChatResponse:
        """Run one chat turn. History from earlier turns on this agent is included."""
        if not message or not str(message).strip():
            raise ValueError("message is required")
        q = str(message).strip()
        logger.info("[agent:chat] START agent=%s message=%r history_len=%d", type(self).__name__, q, len(self.chat_history))
        self.callback_manager.dispatch(AGENT_START, {"message": q})
        initial: AgentState = {
            "messages": self._system_messages() + list(self.chat_history) + [{"role": "user", "content": q}],
            "pending_tool_calls": [],
            "sources": [],
            "steps": [],
            "answer": "",
            "rounds": 0,
        }
        final = await self._graph.ainvoke(initial, config={"recursion_limit": 2 * self.max_rounds + 5})
        answer = (final.get("answer") or "").strip()
        response = AgentChatResponse(
            response=answer,
            sources=list(final.get("sources") or []),
            raw=self._trace(final),
        )
        self._remember(q, final)
        self.callback_manager.dispatch(AGENT_END, {"response": answer})
        logger.info("[agent:chat] END rounds=%d tools_used=%s answer_len=%d",
                    final.get("rounds") or 0, [s.tool_name for s in response.sources], len(answer))
        return response


class OpenAIAgent(GraphAgent):
    """Function-calling agent: the model returns structured tool calls."""

    def __init__(
        self,
        tools: list[BaseTool],
        llm: Any = None,
        callback_manager: CallbackManager | None = None,
        max_rounds: int = MAX_AGENTIC_ROUNDS,
        system_prompt: str | None = None,
    ) -> None:
        self.system_prompt = system_prompt
        super().__init__(tools, llm=llm, callback_manager=callback_manager, max_rounds=max_rounds)
        self._openai_tools = [t.metadata.to_openai_tool() for t in self.tools.values()]

    def _system_messages(self) -> list[dict[str, Any]]:
        if not self.system_prompt:
            return []
        return [{"role": "system", "content": self.system_prompt}]

    def _call_model(self, state: AgentState) -> dict:
        rounds = state.get("rounds") or 0
        messages = list(state.get("messages") or [])
        logger.info("[graph:call_model] IN  round=%d messages=%d", rounds, len(messages))
        result = self._run_model(messages, tools=self._openai_tools or None)
        tool_calls = result.tool_calls
        if tool_calls and rounds < self.max_rounds:
            messages.append({
                "role": "assistant",
                "content": result.content or "",
                "tool_calls": [
                    {
                        "id": tc["id"],
                        "type": "function",
                        "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})},
                    }
                    for tc in tool_calls
                ],
            })
            return {"messages": messages, "pending_tool_calls": tool_calls, "rounds": rounds + 1}
        if tool_calls:
            logger.warning("[graph:call_model] round limit %d reached; dropping tool_calls=%s",
                           self.max_rounds, [tc["name"] for tc in tool_calls])
        answer = result.content or ("" if not tool_calls else ROUND_LIMIT_ANSWER)
        messages.append({"role": "assistant", "content": answer})
        logger.info("[graph:call_model] OUT answer_len=%d", len(answer))
        return {"messages": messages, "pending_tool_calls": [], "answer": answer}

    def _call_tools(self, state: AgentState) -> dict:
        messages = list(state.get("messages") or [])
        sources: list[ToolOutput] = list(state.get("sources") or [])
        for tc in state.get("pending_tool_calls") or []:
            output = call_tool(
                self.tools,
                tc.get("name", ""),
                tc.get("arguments") or {},
                tc.get("id", ""),
                self.callback_manager,
            )
            sources.append(output)
            messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": output.content})
        return {"messages": messages, "sources": sources, "pending_tool_calls": []}

    def _remember(self, message: str, final: AgentState) -> None:
        # Keep tool calls and results so follow-up turns can reuse them
        skip = len(self._system_messages())
        self.chat_history = list(final.get("messages") or [])[skip:]
