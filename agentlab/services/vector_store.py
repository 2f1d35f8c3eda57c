"""
Embeddings (HF Inference API) and the Milvus vector store (server or embedded Milvus Lite).

Responsibility: turn text into normalized vectors, store nodes with their
vectors, and return the top-k most similar nodes for a query vector.
"""

import logging
import math
import tempfile
from pathlib import Path
from typing import Any, Protocol

import httpx

from agentlab.core.config import (
    COLLECTION_NAME,
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    MILVUS_TOKEN,
    MILVUS_URI,
    VECTOR_DIM,
)
from agentlab.core.errors import ServiceUnavailableError
from agentlab.schemas.documents import NodeWithScore, TextNode

logger = logging.getLogger(__name__)


def _normalize(vec: list[float]) -> list[float]:
    norm = math.sqrt(sum(x * x for x in vec)) or 1.0
    return [x / norm for x in vec]


class HuggingFaceEmbedding:
    """
    Batch embeddings via the Hugging Face Inference API (feature extraction).

    Vectors are L2-normalized so a dot product is cosine similarity.
    """

    def __init__(
        self,
        model_name: str = HF_EMBED_MODEL,
        api_key: str | None = None,
        batch_size: int = EMBED_BATCH_SIZE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.model_name = model_name
        self.api_key = api_key if api_key is not None else HF_API_KEY
        self.batch_size = batch_size
        self._transport = transport
        self._api_urls = [
            f"https://router.huggingface.co/hf-inference/models/{model_name}/pipeline/feature-extraction",
            f"https://api-inference.huggingface.co/models/{model_name}",
        ]

    def get_text_embeddings(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        if not self.api_key:
            raise ServiceUnavailableError(
                "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens"
            )
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        all_embeddings: list[list[float]] = []
        with httpx.Client(timeout=EMBED_API_TIMEOUT, transport=self._transport) as client:
            for i in range(0, len(texts), self.batch_size):
                batch = texts[i : i + self.batch_size]
                result = self._post_batch(client, batch, headers)
                if isinstance(result, list) and result and isinstance(result[0], list):
                    batch_emb = result
                else:
                    raise RuntimeError(f"Unexpected HF embedding response for {len(batch)} inputs")
                all_embeddings.extend(_normalize([float(x) for x in vec]) for vec in batch_emb)
        logger.info("[embed] OUT texts=%d model=%s", len(texts), self.model_name)
        return all_embeddings

    def _post_batch(self, client: httpx.Client, batch: list[str], headers: dict[str, str]) -> Any:
        payload = {"inputs": batch, "options": {"wait_for_model": True}}
        response = None
        for api_url in self._api_urls:
            response = client.post(api_url, json=payload, headers=headers)
            # The router rejects some tokens with 403; the legacy endpoint may still accept them
            if response.status_code == 403 and api_url != self._api_urls[-1]:
                continue
            break
        if response.status_code == 200:
            return response.json()
        msg = response.text[:200]
        if response.status_code == 503:
            raise ServiceUnavailableError(f"HF model is loading. Retry later. {msg}")
        if response.status_code == 401:
            raise ServiceUnavailableError(
                "Invalid HF API key. Check HF_API_KEY at https://huggingface.co/settings/tokens"
            )
        if response.status_code == 403:
            raise ServiceUnavailableError(f"HF token lacks Inference API permission. {msg}")
        raise RuntimeError(f"HF API error {response.status_code}: {msg}")

    def get_query_embedding(self, query: str) -> list[float]:
        return self.get_text_embeddings([query])[0]


class VectorStore(Protocol):
    def add(self, nodes: list[TextNode]) -> None: ...

    def query(self, embedding: list[float], top_k: int) -> list[NodeWithScore]: ...


class MilvusVectorStore:
    """
    Node store in a Milvus collection (id, vector, text, file_path,
    file_name, chunk_id). The collection is created on first use.

    With dim=None the dimension is taken from the first inserted vector, and
    queries against a collection that does not exist yet return no hits.
    """

    def __init__(
        self,
        uri: str = MILVUS_URI,
        token: str | None = None,
        collection_name: str = COLLECTION_NAME,
        dim: int | None = VECTOR_DIM,
        client: Any = None,
    ) -> None:
        self.uri = uri
        self.token = token if token is not None else MILVUS_TOKEN
        self.collection_name = collection_name
        self.dim = dim
        self._client = client
        self._collection_ready = False

    @classmethod
    def local(cls, collection_name: str = COLLECTION_NAME, dim: int | None = None) -> "MilvusVectorStore":
        """Throwaway index in an embedded Milvus Lite file under a fresh temp dir."""
        db_dir = tempfile.mkdtemp(prefix="agentlab-index-")
        return cls(uri=str(Path(db_dir) / "index.db"), token="", collection_name=collection_name, dim=dim)

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.uri:
                raise ServiceUnavailableError("MILVUS_URI must be set in .env")
            from pymilvus import MilvusClient

            self._client = MilvusClient(uri=self.uri, token=self.token)
            logger.info("Milvus connection established uri=%s", self.uri)
        return self._client

    def _ensure_collection(self, dim: int | None = None) -> bool:
        """Create the collection if missing; checked against the server once per store."""
        if self._collection_ready:
            return True
        client = self.client
        if client.has_collection(self.collection_name):
            self._collection_ready = True
            return True
        dim = self.dim or dim
        if not dim:
            return False
        client.create_collection(
            collection_name=self.collection_name,
            dimension=dim,
            primary_field_name="id",
            vector_field_name="vector",
            metric_type="COSINE",
            auto_id=True,
        )
        logger.info("Collection %s created (dim=%s)", self.collection_name, dim)
        self._collection_ready = True
        return True

    def add(self, nodes: list[TextNode]) -> None:
        if not nodes:
            return
        rows = []
        for node in nodes:
            if node.embedding is None:
                raise ValueError(f"Node {node.id_} has no embedding")
            meta = node.metadata
            rows.append({
                "vector": node.embedding,
                "text": node.text,
                "file_path": str(meta.get("file_path", "")),
                "file_name": str(meta.get("file_name", "")),
                "chunk_id": int(meta.get("chunk_id", 0)),
            })
        self._ensure_collection(dim=len(rows[0]["vector"]))
        self.client.insert(collection_name=self.collection_name, data=rows)
        self.client.flush(collection_name=self.collection_name)
        logger.info("[vector_store:milvus] stored %d nodes in %s", len(rows), self.collection_name)

    def query(self, embedding: list[float], top_k: int) -> list[NodeWithScore]:
        if not self._ensure_collection():
            logger.info("[vector_store:milvus] collection %s is empty", self.collection_name)
            return []
        results = self.client.search(
            collection_name=self.collection_name,
            data=[embedding],
            limit=top_k,
            output_fields=["text", "file_path", "file_name", "chunk_id"],
        )
        # results: one list of hits per query vector
        hits = results[0] if results else []
        out: list[NodeWithScore] = []
        for h in hits:
            entity = h.get("entity") or h
            node = TextNode(
                id_=str(h.get("id", entity.get("id", ""))),
                text=entity.get("text", ""),
                metadata={
                    "file_path": entity.get("file_path", ""),
                    "file_name": entity.get("file_name", ""),
                    "chunk_id": entity.get("chunk_id", 0),
                },
            )
            out.append(NodeWithScore(node=node, score=float(h.get("distance", h.get("score", 0.0)))))
        logger.info("[vector_store:milvus] OUT hits=%d first_scores=%s", len(out), [round(n.score, 4) for n in out[:5]])
        return out
