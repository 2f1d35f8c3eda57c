"""Schemas for tool descriptors (name, description, typed parameter schema)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ParameterProperty(BaseModel):
    """One named parameter: a primitive JSON type and a description for the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["string", "number", "integer", "boolean"] = Field(..., description="Primitive JSON type.")
    description: str = Field("", description="What the model should pass for this parameter.")


class ParametersSchema(BaseModel):
    """Object schema for a tool's arguments. `required` must name declared properties only."""

    model_config = ConfigDict(frozen=True)

    type: Literal["object"] = "object"
    properties: dict[str, ParameterProperty] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> "ParametersSchema":
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"required parameters not declared in properties: {unknown}")
        return self


class ToolMetadata(BaseModel):
    """Descriptor the agent sees: name (unique within a tool set), description, parameters."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9_-]+$")
    description: str = Field(..., min_length=1)
    parameters: ParametersSchema | None = None

    def to_openai_tool(self) -> dict[str, Any]:
        """OpenAI function-calling format."""
        params = self.parameters or ParametersSchema()
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": params.model_dump(),
            },
        }
