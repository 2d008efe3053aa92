"""Pydantic models for the analyze API.

Attributes are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentFormField(CamelModel):
    id: str
    label: str
    description: str | None = None
    synonyms: list[str] | None = None
    example: str | None = None
    required: bool | None = None


class AgentDocument(CamelModel):
    kind: Literal["text"]
    content: str = Field(min_length=1)
    filename: str | None = None


class AgentAnalyzeOptions(CamelModel):
    form_schema: list[AgentFormField] = Field(min_length=1)
    instructions: str | None = None
    metadata: dict[str, Any] | None = None


class AnalyzeRequest(CamelModel):
    document: AgentDocument
    options: AgentAnalyzeOptions


class FieldOption(CamelModel):
    """One candidate answer for one form field."""

    value: str
    confidence: float | None = None
    rationale: str | None = None
    source_text: str | None = None
    group_id: str | None = None
    group_label: str | None = None


class FieldGroup(CamelModel):
    """One entity described by the document (a person, an invoice...)."""

    id: str
    label: str | None = None
    confidence: float
    rationale: str
    field_candidates: dict[str, list[FieldOption]]


class AgentAction(CamelModel):
    type: str
    target: str | None = None
    payload: dict[str, Any] | None = None
    confidence: float
    rationale: str | None = None


class AnalyzeResult(CamelModel):
    backend: str
    summary: str | None = None
    diagnostics: list[str] | None = None
    extracted_pairs: dict[str, str] = {}
    actions: list[AgentAction] = []
    field_groups: list[FieldGroup] = []
    auto_select_group_id: str | None = None
