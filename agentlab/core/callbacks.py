"""
Callback manager: named events emitted by agents and LLM calls.

Available events:
  llm-start, llm-end, agent-start, agent-end, llm-tool-call, llm-tool-result
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

LLM_START = "llm-start"
LLM_END = "llm-end"
AGENT_START = "agent-start"
AGENT_END = "agent-end"
LLM_TOOL_CALL = "llm-tool-call"
LLM_TOOL_RESULT = "llm-tool-result"

EVENTS: frozenset[str] = frozenset(
    {LLM_START, LLM_END, AGENT_START, AGENT_END, LLM_TOOL_CALL, LLM_TOOL_RESULT}
)


@dataclass
class CallbackEvent:
    """One dispatched event. `payload` is a plain JSON-friendly dict."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[CallbackEvent], None]


class CallbackManager:
    """Event name -> ordered list of subscribers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event {event!r}; expected one of {sorted(EVENTS)}")
        self._handlers.setdefault(event, []).append(handler)
        logger.debug("[callbacks:on] event=%s handlers=%d", event, len(self._handlers[event]))

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event) or []
        if handler in handlers:
            handlers.remove(handler)

    def dispatch(self, event: str, payload: dict[str, Any] | None = None) -> None:
        handlers = list(self._handlers.get(event) or [])
        if not handlers:
            return
        evt = CallbackEvent(name=event, payload=payload or {})
        for handler in handlers:
            handler(evt)


def print_payload(event: CallbackEvent) -> None:
    """Console handler: print the event payload as indented JSON."""
    print(json.dumps(event.payload, indent=2, default=str))
