# Run from project root: python -m agentlab.tutorials.rag_and_tools
# RAG plus a function tool: the agent looks up two budget lines and then
# adds them, reusing its chat history for the third question.

from agentlab.agent.graph import OpenAIAgent
from agentlab.agent.llm import OpenAILLM
from agentlab.agent.tools import sum_numbers_tool
from agentlab.core.config import DATA_DIR
from agentlab.core.settings import Settings
from agentlab.ingest.loader import SimpleDirectoryReader
from agentlab.services.vector_store import HuggingFaceEmbedding
from agentlab.tutorials.common import budget_tool, print_response, register_console_callbacks, run

QUESTIONS = [
    "What's the budget of San Francisco for community health in 2023-24?",
    "What's the budget of San Francisco for public protection in 2023-24?",
    "What's the combined budget of San Francisco for community health and public protection in 2023-24?",
]


async def _main() -> None:
    Settings.llm = OpenAILLM(model="gpt-4o")
    Settings.embed_model = HuggingFaceEmbedding(model_name="BAAI/bge-small-en-v1.5")
    register_console_callbacks()

    documents = SimpleDirectoryReader().load_data(DATA_DIR)

    agent = OpenAIAgent(tools=[budget_tool(documents), sum_numbers_tool()])

    for question in QUESTIONS:
        response = await agent.chat(question)
        print_response(response)


def main() -> None:
    run(_main)


if __name__ == "__main__":
    main()
