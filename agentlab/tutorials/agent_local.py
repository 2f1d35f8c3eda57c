# Run from project root: python -m agentlab.tutorials.agent_local
# Same sum tool, but with a local Mixtral served by Ollama (`ollama pull mixtral:8x7b`).
# The model has no native tool calling, so the ReAct agent drives it with a text protocol.

from agentlab.agent.llm import OllamaLLM
from agentlab.agent.react import ReActAgent
from agentlab.agent.tools import sum_numbers_tool
from agentlab.core.settings import Settings
from agentlab.tutorials.common import print_response, register_console_callbacks, run


async def _main() -> None:
    Settings.llm = OllamaLLM(model="mixtral:8x7b")
    register_console_callbacks()

    agent = ReActAgent(tools=[sum_numbers_tool()])

    response = await agent.chat("Add 101 and 303")
    print_response(response)


def main() -> None:
    run(_main)


if __name__ == "__main__":
    main()
