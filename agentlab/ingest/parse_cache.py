"""
Parsing cache: a flat JSON object mapping file path -> true for files that
were already sent to the parser.

Read at startup (missing file means an empty cache), updated as new files are
parsed, written back once at the end of the batch. There is no expiry and no
invalidation when a source file changes.
"""

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from agentlab.core.config import PARSING_CACHE
from agentlab.schemas.documents import Document

logger = logging.getLogger(__name__)


class Reader(Protocol):
    def load_data(self, file_path: str) -> list[Document]: ...


class ParseCache:
    def __init__(self, path: str | Path = PARSING_CACHE) -> None:
        self.path = Path(path)
        self.entries: dict[str, Any] = {}

    @classmethod
    def load(cls, path: str | Path = PARSING_CACHE) -> "ParseCache":
        cache = cls(path)
        try:
            data: Any = json.loads(cache.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("No cache found at %s", cache.path)
            return cache
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("[parse_cache] %s is not valid JSON (%s); starting empty", cache.path, e)
            return cache
        if not isinstance(data, dict):
            logger.warning("[parse_cache] %s does not hold a JSON object; starting empty", cache.path)
            return cache
        cache.entries = {str(k): v for k, v in data.items()}
        logger.info("[parse_cache] loaded %d entries from %s", len(cache.entries), cache.path)
        return cache

    def is_parsed(self, file_path: str) -> bool:
        return bool(self.entries.get(str(file_path)))

    def mark(self, file_path: str) -> None:
        self.entries[str(file_path)] = True

    def save(self) -> None:
        self.path.write_text(json.dumps(self.entries), encoding="utf-8")
        logger.info("[parse_cache] wrote %d entries to %s", len(self.entries), self.path)


def load_with_cache(files: list[str], reader: Reader, cache: ParseCache) -> list[Document]:
    """
    Parse every file the cache has not seen, mark it, and persist the cache
    once the whole batch is done. A failure mid-batch propagates before the
    cache is written.
    """
    documents: list[Document] = []
    for file_path in files:
        if cache.is_parsed(file_path):
            logger.info("[parse_cache] skip cached file=%s", file_path)
            continue
        documents.extend(reader.load_data(file_path))
        cache.mark(file_path)
    cache.save()
    return documents
