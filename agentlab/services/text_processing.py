"""
Text processing for RAG: cleaning and chunking documents into nodes.

Noisy text (extra spaces, repeated lines, mixed unicode) degrades embeddings;
chunk boundaries decide what the retriever can return as one unit.
"""

import re
import unicodedata

from agentlab.schemas.documents import Document, TextNode


def clean_text(text: str) -> str:
    """NFKC-normalize, strip lines, drop consecutive duplicates, collapse blank runs."""
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    result: list[str] = []
    previous: str | None = None
    for line in (raw.strip() for raw in text.splitlines()):
        if line == previous:
            continue
        previous = line
        if line == "" and (not result or result[-1] == ""):
            continue
        result.append(line)
    return "\n".join(result).strip()


def _joined_len(parts: list[str]) -> int:
    return sum(len(p) for p in parts) + max(0, len(parts) - 1)


def _tail_overlap(parts: list[str], overlap: int) -> list[str]:
    """Longest suffix of parts whose joined length (plus separator) fits in overlap."""
    tail: list[str] = []
    size = 0
    for part in reversed(parts):
        if size + len(part) + 1 > overlap:
            break
        tail.append(part)
        size += len(part) + 1
    tail.reverse()
    return tail


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 100) -> list[str]:
    """
    Split text into chunks of at most ~chunk_size characters on sentence
    boundaries, falling back to word boundaries for oversized sentences. The
    tail of each chunk (up to overlap characters) is repeated at the start of
    the next one.
    """
    if not text or not text.strip():
        return []
    text = text.strip()
    if len(text) <= chunk_size:
        return [text]

    sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", text) if s.strip()]
    units: list[str] = []
    for sent in sentences:
        if len(sent) > chunk_size:
            units.extend(sent.split())
        else:
            units.append(sent)

    chunks: list[str] = []
    current: list[str] = []
    for unit in units:
        if current and _joined_len(current) + 1 + len(unit) > chunk_size:
            chunks.append(" ".join(current))
            current = _tail_overlap(current, overlap)
            if current and _joined_len(current) + 1 + len(unit) > chunk_size:
                current = []
        current.append(unit)
    if current:
        chunks.append(" ".join(current))
    return chunks


def split_documents(
    documents: list[Document],
    chunk_size: int = 1000,
    overlap: int = 100,
) -> list[TextNode]:
    """Clean and chunk each document; every node carries its document's metadata plus chunk_id."""
    nodes: list[TextNode] = []
    for doc in documents:
        for i, chunk in enumerate(chunk_text(clean_text(doc.text), chunk_size=chunk_size, overlap=overlap)):
            metadata = dict(doc.metadata)
            metadata["chunk_id"] = i
            metadata["doc_id"] = doc.id_
            nodes.append(TextNode(text=chunk, metadata=metadata))
    return nodes
