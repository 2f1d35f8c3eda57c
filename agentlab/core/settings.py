"""
Process-wide settings: the LLM, the embedding model and the callback manager.

Set once at startup by the entry point and read by agents, indexes and query
engines that were not given an explicit collaborator.
"""

from dataclasses import dataclass, field
from typing import Any

from agentlab.core.callbacks import CallbackManager


@dataclass
class _Settings:
    llm: Any = None
    embed_model: Any = None
    callback_manager: CallbackManager = field(default_factory=CallbackManager)

    def require_llm(self) -> Any:
        if self.llm is None:
            raise ValueError("No LLM configured; set Settings.llm or pass llm=...")
        return self.llm

    def require_embed_model(self) -> Any:
        if self.embed_model is None:
            raise ValueError("No embedding model configured; set Settings.embed_model or pass embed_model=...")
        return self.embed_model

    def reset(self) -> None:
        self.llm = None
        self.embed_model = None
        self.callback_manager = CallbackManager()


Settings = _Settings()
