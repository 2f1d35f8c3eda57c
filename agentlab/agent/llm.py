"""
Agent LLMs: OpenAI (hosted, function calling) and Ollama (local, text only).

Both expose chat(messages, tools=None) -> ChatResult and complete(prompt) -> str,
so agents and query engines do not care which backend Settings.llm holds.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from openai import OpenAI

from agentlab.core.config import (
    AGENT_MAX_TOKENS,
    LLM_API_TIMEOUT,
    OLLAMA_API_TIMEOUT,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from agentlab.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """One model turn: text content and/or parsed tool calls ({id, name, arguments})."""

    content: str | None = None
    tool_calls: list[dict[str, Any]] = field(default_factory=list)


def _parse_arguments(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("[llm] tool call arguments are not valid JSON: %r", raw)
        return {}
    return args if isinstance(args, dict) else {}


class OpenAILLM:
    """OpenAI chat completions with function calling."""

    supports_tools = True

    def __init__(
        self,
        model: str = OPENAI_LLM_MODEL,
        api_key: str | None = None,
        max_tokens: int = AGENT_MAX_TOKENS,
        client: Any = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        if client is None:
            key = api_key if api_key is not None else OPENAI_API_KEY
            if not key:
                raise ServiceUnavailableError(
                    "OPENAI_API_KEY must be set in .env. Get a key from https://platform.openai.com/api-keys"
                )
            client = OpenAI(api_key=key, timeout=LLM_API_TIMEOUT)
        self._client = client

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> ChatResult:
        logger.info("[llm:openai] IN  model=%s messages=%d tools=%d", self.model, len(messages), len(tools or []))
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }
        if tools:
            kwargs["tools"] = tools
        response = self._client.chat.completions.create(**kwargs)
        msg = response.choices[0].message if response.choices else None
        if not msg:
            return ChatResult()
        content = (getattr(msg, "content", None) or "").strip() or None
        tool_calls = []
        for tc in getattr(msg, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            if not fn:
                continue
            tool_calls.append({
                "id": getattr(tc, "id", None) or "",
                "name": getattr(fn, "name", None) or "",
                "arguments": _parse_arguments(getattr(fn, "arguments", None)),
            })
        if tool_calls:
            logger.info("[llm:openai] OUT tool_calls=%s", [t["name"] for t in tool_calls])
        if content:
            logger.info("[llm:openai] OUT content_len=%d", len(content))
        return ChatResult(content=content, tool_calls=tool_calls)

    def complete(self, prompt: str) -> str:
        result = self.chat([{"role": "user", "content": prompt}])
        return result.content or ""


class OllamaLLM:
    """Local model served by Ollama. Text in, text out; tool use goes through the ReAct prompt."""

    supports_tools = False

    def __init__(
        self,
        model: str = OLLAMA_MODEL,
        base_url: str = OLLAMA_BASE_URL,
        timeout: float = OLLAMA_API_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> ChatResult:
        if tools:
            logger.debug("[llm:ollama] ignoring %d tool definitions", len(tools))
        logger.info("[llm:ollama] IN  model=%s messages=%d", self.model, len(messages))
        payload = {"model": self.model, "messages": messages, "stream": False}
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(f"{self.base_url}/api/chat", json=payload)
        if response.status_code != 200:
            raise ServiceUnavailableError(
                f"Ollama error {response.status_code} at {self.base_url}: {response.text[:200]}"
            )
        data = response.json()
        out = ((data.get("message") or {}).get("content") or "").strip()
        logger.info("[llm:ollama] OUT response_len=%d", len(out))
        logger.debug("[llm:ollama] OUT response_full=%r", out)
        return ChatResult(content=out or None)

    def complete(self, prompt: str) -> str:
        result = self.chat([{"role": "user", "content": prompt}])
        return result.content or ""
