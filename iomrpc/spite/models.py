"""Pydantic models for task contexts and spite envelopes.

Both shapes of the ``body`` oneof are accepted: the tagged form
``{"body": {"case": "response", "value": {...}}}`` and the proto3 JSON form
where the variant is a top-level key (``{"response": {...}}``).
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

RESPONSE_CASE = "response"


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


class SpiteStatus(_WireModel):
    """Inner task status."""

    task_id: int | None = None
    status: int = 0
    error: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _null_status(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("error", mode="before")
    @classmethod
    def _null_error(cls, value: Any) -> Any:
        return "" if value is None else value


class ModuleResponse(_WireModel):
    """Payload of the ``response`` body variant."""

    output: str = ""
    error: str = ""
    kv: dict[str, str] = Field(default_factory=dict)
    array: list[str] = Field(default_factory=list)

    @field_validator("output", "error", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value


class SpiteBody(BaseModel):
    """Tagged union: ``case`` names the variant, ``value`` holds it."""

    case: str
    value: Any = None

    @model_validator(mode="after")
    def _coerce_response(self) -> "SpiteBody":
        if self.case == RESPONSE_CASE and isinstance(self.value, Mapping):
            self.value = ModuleResponse.model_validate(dict(self.value))
        return self


class Spite(_WireModel):
    """Result envelope of a remote task."""

    name: str | None = None
    task_id: int | None = None
    error: int = 0
    status: SpiteStatus | None = None
    body: SpiteBody | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _null_error(cls, value: Any) -> Any:
        # proto3 JSON writers may emit null for an unset code
        return 0 if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _lift_oneof(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or data.get("body") is not None:
            return data
        fields = set(cls.model_fields) | {to_camel(name) for name in cls.model_fields}
        for key, value in data.items():
            if key not in fields and isinstance(value, Mapping):
                lifted = {k: v for k, v in data.items() if k != key}
                lifted["body"] = {"case": key, "value": value}
                return lifted
        return data

    @property
    def response(self) -> ModuleResponse | None:
        if self.body is not None and self.body.case == RESPONSE_CASE and isinstance(self.body.value, ModuleResponse):
            return self.body.value
        return None


class TaskContext(_WireModel):
    """Result of waiting for a task: the task, its session and one spite."""

    task: dict[str, Any] | None = None
    session: dict[str, Any] | None = None
    spite: Spite | None = None
