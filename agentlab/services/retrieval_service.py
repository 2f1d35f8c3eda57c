"""
Retrieval: vector index, top-k retriever, and answer-synthesizing query engine.

Responsibility: chunk and embed documents into a vector store, fetch the most
similar chunks for a query, and have the LLM answer from those chunks.
"""

import logging
from typing import Any

from agentlab.core.config import CHUNK_OVERLAP, CHUNK_SIZE, SIMILARITY_TOP_K
from agentlab.core.settings import Settings
from agentlab.schemas.documents import Document, NodeWithScore
from agentlab.schemas.response import QueryResponse
from agentlab.services.text_processing import split_documents
from agentlab.services.vector_store import MilvusVectorStore, VectorStore

logger = logging.getLogger(__name__)

QA_PROMPT = """Context information is below.
---------------------
{context}
---------------------
Answer the query using only the context information above, not prior knowledge.
If the answer is not present, say: "I couldn't find that information."

Query: {query}
Answer: """


class VectorStoreIndex:
    """Documents chunked, embedded and held in a vector store (embedded Milvus Lite unless one is given)."""

    def __init__(self, vector_store: VectorStore | None = None, embed_model: Any = None) -> None:
        self.vector_store = vector_store if vector_store is not None else MilvusVectorStore.local()
        self.embed_model = embed_model if embed_model is not None else Settings.require_embed_model()

    @classmethod
    def from_documents(
        cls,
        documents: list[Document],
        vector_store: VectorStore | None = None,
        embed_model: Any = None,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
    ) -> "VectorStoreIndex":
        """
        Build an index over documents. With an empty document list over a
        persistent store, the index simply serves what the store already holds.
        """
        index = cls(vector_store=vector_store, embed_model=embed_model)
        index.insert(documents, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        return index

    def insert(
        self,
        documents: list[Document],
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
    ) -> int:
        nodes = split_documents(documents, chunk_size=chunk_size, overlap=chunk_overlap)
        if not nodes:
            logger.info("[index:insert] no new nodes (documents=%d)", len(documents))
            return 0
        embeddings = self.embed_model.get_text_embeddings([n.text for n in nodes])
        embedded = [n.model_copy(update={"embedding": emb}) for n, emb in zip(nodes, embeddings)]
        self.vector_store.add(embedded)
        logger.info("[index:insert] documents=%d nodes=%d", len(documents), len(embedded))
        return len(embedded)

    def as_retriever(self, similarity_top_k: int = SIMILARITY_TOP_K) -> "VectorIndexRetriever":
        return VectorIndexRetriever(self, similarity_top_k=similarity_top_k)

    def as_query_engine(
        self,
        retriever: "VectorIndexRetriever | None" = None,
        llm: Any = None,
    ) -> "RetrieverQueryEngine":
        return RetrieverQueryEngine(retriever or self.as_retriever(), llm=llm)


class VectorIndexRetriever:
    """Embeds the query and returns the similarity_top_k closest nodes."""

    def __init__(self, index: VectorStoreIndex, similarity_top_k: int = SIMILARITY_TOP_K) -> None:
        self.index = index
        self.similarity_top_k = similarity_top_k

    def retrieve(self, query: str) -> list[NodeWithScore]:
        logger.info("[retrieval:retrieve] IN  query=%r top_k=%d", query, self.similarity_top_k)
        if not query or not query.strip():
            return []
        query_vec = self.index.embed_model.get_query_embedding(query.strip())
        hits = self.index.vector_store.query(query_vec, top_k=self.similarity_top_k)
        logger.info("[retrieval:retrieve] OUT hits=%d sources=%s",
                    len(hits), [h.node.metadata.get("file_name") for h in hits[:5]])
        return hits


class RetrieverQueryEngine:
    """Retrieve chunks, then ask the LLM to answer from them."""

    def __init__(self, retriever: VectorIndexRetriever, llm: Any = None) -> None:
        self.retriever = retriever
        self._llm = llm

    @property
    def llm(self) -> Any:
        return self._llm if self._llm is not None else Settings.require_llm()

    def query(self, query: str) -> QueryResponse:
        nodes = self.retriever.retrieve(query)
        if not nodes:
            return QueryResponse(response="I couldn't find that information.", source_nodes=[])
        context = "\n\n".join(n.text for n in nodes)
        prompt = QA_PROMPT.format(context=context, query=query)
        logger.info("[query_engine:query] prompt_len=%d nodes=%d", len(prompt), len(nodes))
        answer = self.llm.complete(prompt).strip()
        logger.info("[query_engine:query] OUT answer_len=%d", len(answer))
        return QueryResponse(response=answer or "No answer generated.", source_nodes=nodes)
