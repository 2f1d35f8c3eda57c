# Run from project root: python -m agentlab.tutorials.persistent_rag
# Needs LLAMA_CLOUD_API_KEY and a running Milvus (MILVUS_URI, default http://localhost:19530).
# Files are parsed by LlamaParse only once: ./cache.json remembers what was
# already sent, and the chunks themselves live on in the Milvus collection.

from pathlib import Path

from agentlab.agent.graph import OpenAIAgent
from agentlab.agent.llm import OpenAILLM
from agentlab.agent.tools import sum_numbers_tool
from agentlab.core.config import BUDGET_PDF, DATA_DIR, PARSING_CACHE
from agentlab.core.settings import Settings
from agentlab.ingest.llama_parse import LlamaParseReader
from agentlab.ingest.parse_cache import ParseCache, load_with_cache
from agentlab.services.vector_store import HuggingFaceEmbedding, MilvusVectorStore
from agentlab.tutorials.common import budget_tool, print_response, register_console_callbacks, run

FILES_TO_PARSE = [str(Path(DATA_DIR) / BUDGET_PDF)]

QUESTIONS = [
    "What's the budget of San Francisco for the health service system in 2023-24?",
    "What's the budget of San Francisco for the police department in 2023-24?",
    "What's the combined budget of San Francisco for the health service system and police department in 2023-24?",
]


async def _main() -> None:
    Settings.llm = OpenAILLM(model="gpt-4o")
    Settings.embed_model = HuggingFaceEmbedding(model_name="BAAI/bge-small-en-v1.5")
    register_console_callbacks()

    vector_store = MilvusVectorStore()

    # load only files we haven't parsed before
    cache = ParseCache.load(PARSING_CACHE)
    documents = load_with_cache(FILES_TO_PARSE, LlamaParseReader(result_type="markdown"), cache)

    agent = OpenAIAgent(tools=[budget_tool(documents, vector_store=vector_store), sum_numbers_tool()])

    for question in QUESTIONS:
        response = await agent.chat(question)
        print_response(response)


def main() -> None:
    run(_main)


if __name__ == "__main__":
    main()
