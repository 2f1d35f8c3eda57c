"""
Fakes for tests: a scripted LLM and a keyword-count embedding model, so
nothing here talks to OpenAI, Ollama or Hugging Face.
"""

from typing import Any

from agentlab.agent.llm import ChatResult

VOCAB = ["health", "police", "budget", "library", "sum"]


class ScriptedLLM:
    """Returns the queued ChatResults in order and records every call."""

    def __init__(self, results: list[ChatResult]) -> None:
        self.results = list(results)
        self.calls: list[dict[str, Any]] = []
        self.prompts: list[str] = []

    def chat(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None = None) -> ChatResult:
        self.calls.append({"messages": [dict(m) for m in messages], "tools": tools})
        if not self.results:
            raise AssertionError("ScriptedLLM ran out of results")
        return self.results.pop(0)

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        result = self.chat([{"role": "user", "content": prompt}])
        return result.content or ""


class KeywordEmbedding:
    """One dimension per vocabulary word plus a small constant so no vector is zero."""

    def __init__(self) -> None:
        self.calls = 0

    def _embed(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(word)) for word in VOCAB] + [0.01]

    def get_text_embeddings(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [self._embed(t) for t in texts]

    def get_query_embedding(self, query: str) -> list[float]:
        return self._embed(query)
