# Run from project root: python -m agentlab.tutorials.agent_basic
# A function-calling agent with a single tool that sums two numbers.

from agentlab.agent.graph import OpenAIAgent
from agentlab.agent.llm import OpenAILLM
from agentlab.agent.tools import sum_numbers_tool
from agentlab.core.settings import Settings
from agentlab.tutorials.common import print_response, register_console_callbacks, run


async def _main() -> None:
    Settings.llm = OpenAILLM(model="gpt-4-turbo")
    register_console_callbacks()

    agent = OpenAIAgent(tools=[sum_numbers_tool()])

    response = await agent.chat("Add 101 and 303")
    print_response(response)


def main() -> None:
    run(_main)


if __name__ == "__main__":
    main()
