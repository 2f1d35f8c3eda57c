# Run from project root: python -m agentlab.tutorials.agentic_rag
# Agentic RAG: documents under DATA_DIR are embedded into a throwaway Milvus Lite index and
# exposed to the agent as a query-engine tool.

from agentlab.agent.graph import OpenAIAgent
from agentlab.agent.llm import OpenAILLM
from agentlab.core.config import DATA_DIR
from agentlab.core.settings import Settings
from agentlab.ingest.loader import SimpleDirectoryReader
from agentlab.services.vector_store import HuggingFaceEmbedding
from agentlab.tutorials.common import budget_tool, print_response, register_console_callbacks, run


async def _main() -> None:
    # set LLM and the embedding model
    Settings.llm = OpenAILLM(model="gpt-4o")
    Settings.embed_model = HuggingFaceEmbedding(model_name="BAAI/bge-small-en-v1.5")
    register_console_callbacks()

    documents = SimpleDirectoryReader().load_data(DATA_DIR)

    agent = OpenAIAgent(tools=[budget_tool(documents)])

    response = await agent.chat("What's the budget of San Francisco in 2023-2024?")
    print_response(response)


def main() -> None:
    run(_main)


if __name__ == "__main__":
    main()
