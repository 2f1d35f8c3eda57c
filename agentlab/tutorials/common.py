"""
Shared pieces of the tutorial scripts: logging/run wrapper, console
callbacks, the budget query-engine tool and response printing.
"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable

from agentlab.agent.tools import QueryEngineTool
from agentlab.core.callbacks import LLM_TOOL_CALL, LLM_TOOL_RESULT, print_payload
from agentlab.core.config import LOG_LEVEL, SIMILARITY_TOP_K
from agentlab.core.settings import Settings
from agentlab.schemas.documents import Document
from agentlab.schemas.response import AgentChatResponse
from agentlab.schemas.tool import ToolMetadata
from agentlab.services.retrieval_service import VectorStoreIndex
from agentlab.services.vector_store import VectorStore

logger = logging.getLogger(__name__)

BUDGET_TOOL_NAME = "san_francisco_budget_tool"
BUDGET_TOOL_DESCRIPTION = (
    "This tool can answer detailed questions about the individual components "
    "of the budget of San Francisco in 2023-2024."
)


def register_console_callbacks() -> None:
    """Print tool calls and tool results so we can see the work in progress."""
    Settings.callback_manager.on(LLM_TOOL_CALL, print_payload)
    Settings.callback_manager.on(LLM_TOOL_RESULT, print_payload)


def budget_tool(documents: list[Document], vector_store: VectorStore | None = None) -> QueryEngineTool:
    """Index documents, retrieve the top 10 chunks per query, and expose the query engine as a tool."""
    index = VectorStoreIndex.from_documents(documents, vector_store=vector_store)
    retriever = index.as_retriever(similarity_top_k=SIMILARITY_TOP_K)
    query_engine = index.as_query_engine(retriever=retriever)
    return QueryEngineTool(
        query_engine=query_engine,
        metadata=ToolMetadata(name=BUDGET_TOOL_NAME, description=BUDGET_TOOL_DESCRIPTION),
    )


def print_response(response: AgentChatResponse) -> None:
    print(response.model_dump_json(indent=2))


def run(main: Callable[[], Awaitable[Any]]) -> None:
    """Run a tutorial coroutine; any failure is logged and exits with status 1."""
    logging.basicConfig(level=LOG_LEVEL)
    try:
        asyncio.run(main())
    except Exception:
        logger.exception("Tutorial failed")
        sys.exit(1)
