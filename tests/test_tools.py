"""
Unit tests for tool descriptors, the sum tool, query-engine tools and call_tool.
"""

import pytest
from pydantic import ValidationError

from agentlab.agent.tools import (
    QUERY_PARAMETERS,
    FunctionTool,
    QueryEngineTool,
    call_tool,
    index_tools,
    sum_numbers,
    sum_numbers_tool,
)
from agentlab.core.callbacks import LLM_TOOL_CALL, LLM_TOOL_RESULT, CallbackManager
from agentlab.schemas.response import QueryResponse
from agentlab.schemas.tool import ParametersSchema, ToolMetadata


class FakeQueryEngine:
    def __init__(self, answer: str) -> None:
        self.answer = answer
        self.queries: list[str] = []

    def query(self, query: str) -> QueryResponse:
        self.queries.append(query)
        return QueryResponse(response=self.answer)


class TestSumNumbers:
    def test_integers(self) -> None:
        assert sum_numbers(101, 303) == "404"

    def test_mixed_float(self) -> None:
        assert sum_numbers(3200, 2012.5) == "5212.5"

    def test_integral_float_prints_without_fraction(self) -> None:
        assert sum_numbers(101.0, 303.0) == "404"

    def test_non_finite_results_use_js_spelling(self) -> None:
        assert sum_numbers(float("inf"), 1) == "Infinity"
        assert sum_numbers(float("-inf"), 1) == "-Infinity"
        assert sum_numbers(float("nan"), 1) == "NaN"

    def test_descriptor(self) -> None:
        tool = sum_numbers_tool()
        assert tool.metadata.name == "sumNumbers"
        assert tool.metadata.description == "Use this function to sum two numbers"
        params = tool.metadata.parameters
        assert params is not None
        assert set(params.properties) == {"a", "b"}
        assert params.required == ["a", "b"]
        assert params.properties["a"].type == "number"


class TestParametersSchema:
    def test_required_is_subset_of_properties(self) -> None:
        for tool in (sum_numbers_tool(), QueryEngineTool(FakeQueryEngine("x"), ToolMetadata(name="q", description="d"))):
            params = tool.metadata.parameters
            assert set(params.required) <= set(params.properties)

    def test_undeclared_required_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ParametersSchema.model_validate({
                "type": "object",
                "properties": {"a": {"type": "number", "description": "A"}},
                "required": ["a", "b"],
            })

    def test_unknown_property_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ParametersSchema.model_validate({"properties": {"a": {"type": "date"}}})

    def test_descriptor_is_immutable(self) -> None:
        meta = ToolMetadata(name="t", description="d")
        with pytest.raises(ValidationError):
            meta.name = "other"

    def test_openai_tool_format(self) -> None:
        openai_tool = sum_numbers_tool().metadata.to_openai_tool()
        assert openai_tool["type"] == "function"
        assert openai_tool["function"]["name"] == "sumNumbers"
        assert openai_tool["function"]["parameters"] == {
            "type": "object",
            "properties": {
                "a": {"type": "number", "description": "First number to sum"},
                "b": {"type": "number", "description": "Second number to sum"},
            },
            "required": ["a", "b"],
        }


class TestFunctionTool:
    def test_call_stringifies_result(self) -> None:
        tool = FunctionTool.from_defaults(lambda x: x * 2, name="double", description="Double x")
        out = tool.call({"x": 21})
        assert out.content == "42"
        assert out.tool_name == "double"
        assert not out.is_error

    def test_defaults_from_function(self) -> None:
        def shout(text: str) -> str:
            """Upper-case the text."""
            return text.upper()

        tool = FunctionTool.from_defaults(shout)
        assert tool.metadata.name == "shout"
        assert tool.metadata.description == "Upper-case the text."
        assert tool.metadata.parameters is None


class TestQueryEngineTool:
    def test_gets_implicit_query_parameter(self) -> None:
        tool = QueryEngineTool(FakeQueryEngine("x"), ToolMetadata(name="budget", description="Budget questions"))
        assert tool.metadata.parameters == QUERY_PARAMETERS

    def test_call_queries_engine(self) -> None:
        engine = FakeQueryEngine("$1.2B")
        tool = QueryEngineTool(engine, ToolMetadata(name="budget", description="Budget questions"))
        out = tool.call({"input": "police budget"})
        assert engine.queries == ["police budget"]
        assert out.content == "$1.2B"

    def test_accepts_other_argument_name(self) -> None:
        engine = FakeQueryEngine("ok")
        tool = QueryEngineTool(engine, ToolMetadata(name="budget", description="Budget questions"))
        tool.call({"query": "health"})
        assert engine.queries == ["health"]

    def test_empty_input_is_error(self) -> None:
        engine = FakeQueryEngine("ok")
        tool = QueryEngineTool(engine, ToolMetadata(name="budget", description="Budget questions"))
        out = tool.call({})
        assert out.is_error
        assert engine.queries == []


class TestCallTool:
    def test_emits_call_and_result_events(self) -> None:
        manager = CallbackManager()
        seen = []
        manager.on(LLM_TOOL_CALL, seen.append)
        manager.on(LLM_TOOL_RESULT, seen.append)
        tools = index_tools([sum_numbers_tool()])

        out = call_tool(tools, "sumNumbers", {"a": 101, "b": 303}, "call_1", manager)

        assert out.content == "404"
        assert out.tool_call_id == "call_1"
        assert [e.name for e in seen] == [LLM_TOOL_CALL, LLM_TOOL_RESULT]
        assert seen[0].payload == {"tool_call": {"id": "call_1", "name": "sumNumbers", "input": {"a": 101, "b": 303}}}
        assert seen[1].payload["tool_result"] == {"output": "404", "is_error": False}

    def test_unknown_tool_is_error_output(self) -> None:
        out = call_tool({}, "nope", {}, "call_1", CallbackManager())
        assert out.is_error
        assert "Unknown tool" in out.content

    def test_bad_arguments_are_reported_to_model(self) -> None:
        tools = index_tools([sum_numbers_tool()])
        out = call_tool(tools, "sumNumbers", {"a": 1}, "call_1", CallbackManager())
        assert out.is_error
        assert out.content.startswith("Error:")

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError):
            index_tools([sum_numbers_tool(), sum_numbers_tool()])
