"""Schemas for loaded documents, indexed chunks and retrieval hits."""

import uuid
from typing import Any

from pydantic import BaseModel, Field


def _new_id() -> str:
    return uuid.uuid4().hex


class Document(BaseModel):
    """A whole source document as returned by a reader."""

    id_: str = Field(default_factory=_new_id)
    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class TextNode(BaseModel):
    """One chunk of a document, optionally with its embedding."""

    id_: str = Field(default_factory=_new_id)
    text: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    embedding: list[float] | None = None


class NodeWithScore(BaseModel):
    """A retrieval hit: the chunk and its similarity to the query."""

    node: TextNode
    score: float = 0.0

    @property
    def text(self) -> str:
        return self.node.text
