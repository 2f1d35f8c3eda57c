"""
ReAct agent for local models that have no native function calling.

The model is told about the tools in a system prompt and must reply with

    Thought: ...
    Action: <tool name>
    Input: {"arg": value}

or, once it can answer,

    Thought: ...
    Answer: ...

Tool results are fed back as "Observation: ..." messages. The full trace is
returned as AgentChatResponse.raw.
"""

import json
import logging
import re
from typing import Any

from agentlab.agent.graph import ROUND_LIMIT_ANSWER, AgentState, GraphAgent
from agentlab.agent.tools import call_tool
from agentlab.schemas.response import ReasoningStep, ToolOutput

logger = logging.getLogger(__name__)

_THOUGHT_RE = re.compile(r"Thought:\s*(.*?)(?=\s*(?:Action|Answer):|\Z)", re.DOTALL)
_ACTION_RE = re.compile(r"Action:\s*([^\n]+?)\s*(?:Action )?Input:\s*(.*)", re.DOTALL)
_ANSWER_RE = re.compile(r"Answer:\s*(.*)", re.DOTALL)

REACT_HEADER = """You are designed to help with a variety of tasks, from answering questions to providing summaries to other types of analyses.

## Tools
You have access to the following tools. Use them when they help you answer.

{tool_desc}

## Output Format
To use a tool, reply in exactly this format:

Thought: I need to use a tool to help me answer the question.
Action: the tool name, one of [{tool_names}]
Input: the tool arguments as a JSON object, e.g. {{"a": 1, "b": 2}}

Always start with a Thought. The user will reply with:

Observation: the tool result

When you can answer without using any more tools, reply in this format:

Thought: I can answer without using any more tools.
Answer: your answer here
"""


def _extract_json(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    if start < 0:
        return None
    try:
        value, _ = json.JSONDecoder().raw_decode(text[start:])
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def parse_react_output(text: str) -> ReasoningStep:
    """Parse one model reply into an action step or a response step."""
    text = (text or "").strip()
    thought_match = _THOUGHT_RE.search(text)
    thought = thought_match.group(1).strip() if thought_match else ""
    action_match = _ACTION_RE.search(text)
    answer_match = _ANSWER_RE.search(text)

    if action_match and (not answer_match or action_match.start() < answer_match.start()):
        action = action_match.group(1).strip().strip("`'\"")
        action_input = _extract_json(action_match.group(2))
        return ReasoningStep(
            type="action",
            thought=thought,
            action=action,
            action_input=action_input,
            is_error=action_input is None,
        )
    if answer_match:
        return ReasoningStep(type="response", thought=thought, response=answer_match.group(1).strip())
    # No protocol markers: treat the whole reply as the answer
    return ReasoningStep(type="response", thought=thought, response=text)


class ReActAgent(GraphAgent):
    """Agent for local models; reasoning steps are returned in the response trace."""

    def _tool_description(self) -> str:
        lines = []
        for name, tool in self.tools.items():
            lines.append(f"> Tool name: {name}")
            lines.append(f"Tool description: {tool.metadata.description}")
            params = tool.metadata.parameters
            schema = params.model_dump() if params is not None else {}
            lines.append(f"Tool args: {json.dumps(schema)}")
            lines.append("")
        return "\n".join(lines).strip()

    def _system_messages(self) -> list[dict[str, Any]]:
        header = REACT_HEADER.format(
            tool_desc=self._tool_description(),
            tool_names=", ".join(self.tools),
        )
        return [{"role": "system", "content": header}]

    def _call_model(self, state: AgentState) -> dict:
        rounds = state.get("rounds") or 0
        messages = list(state.get("messages") or [])
        logger.info("[react:call_model] IN  round=%d messages=%d", rounds, len(messages))
        result = self._run_model(messages)
        text = result.content or ""
        step = parse_react_output(text)
        messages.append({"role": "assistant", "content": text})
        steps = list(state.get("steps") or []) + [step]
        logger.info("[react:call_model] OUT step=%s action=%r", step.type, step.action)

        if step.type == "action" and rounds < self.max_rounds:
            pending = [{
                "id": f"react-{rounds + 1}",
                "name": step.action or "",
                "arguments": step.action_input or {},
                "invalid_input": step.is_error,
            }]
            return {"messages": messages, "steps": steps, "pending_tool_calls": pending, "rounds": rounds + 1}

        answer = step.response if step.type == "response" else ROUND_LIMIT_ANSWER
        return {"messages": messages, "steps": steps, "pending_tool_calls": [], "answer": answer or ""}

    def _call_tools(self, state: AgentState) -> dict:
        messages = list(state.get("messages") or [])
        steps = list(state.get("steps") or [])
        sources: list[ToolOutput] = list(state.get("sources") or [])
        for tc in state.get("pending_tool_calls") or []:
            if tc.get("invalid_input"):
                observation = "Error: could not parse Input as a JSON object. Reply again using the required format."
                is_error = True
            else:
                output = call_tool(self.tools, tc["name"], tc["arguments"], tc["id"], self.callback_manager)
                sources.append(output)
                observation, is_error = output.content, output.is_error
            steps.append(ReasoningStep(type="observation", observation=observation, is_error=is_error))
            messages.append({"role": "user", "content": f"Observation: {observation}"})
        return {"messages": messages, "steps": steps, "sources": sources, "pending_tool_calls": []}

    def _trace(self, final: AgentState) -> list[ReasoningStep] | None:
        return list(final.get("steps") or [])
