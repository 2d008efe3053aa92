"""Prompts and the response JSON Schema for form-filling extraction.

The model is asked to answer per entity (fieldGroups), each entity
carrying candidate values per form field.
"""

from models import AgentDocument, AgentFormField

SYSTEM_PROMPT = (
    "You are an information extraction assistant. Extract the values for the "
    "form fields the user lists from the document strictly, and return a "
    "result that conforms to the provided JSON Schema."
)

_OUTPUT_RULES = """
OUTPUT RULES:
1. Always return fieldGroups, even when the document describes a single entity.
   One group per real-world entity (one person, one invoice...), NOT one group per field.
   Each group contains:
   - id (required) and label (optional)
   - confidence (0-1) and a rationale explaining where the confidence comes from
   - fieldCandidates: { field id: list of candidates }. Field ids MUST match the field list above.
     A candidate is a string or { value, confidence (0-1), rationale?, sourceText? }.
     Only keep candidates with confidence >= 0.75; the server sorts them.
2. If the document suggests follow-up operations, return an actions array. Each action has
   at least type and confidence, optionally target, payload and rationale.
3. Give honest, conservative confidences. When unsure, use null and explain why in the rationale.
4. Groups are ranked by the server; do not reorder them to look confident.

FORMAT:
- The output MUST conform to the provided JSON Schema.
- Do NOT include any explanation text.
- Do NOT wrap the output in code fences (```json)."""


def build_prompt(
    document: AgentDocument,
    form_schema: list[AgentFormField],
    instructions: str | None = None,
) -> str:
    """Render the user prompt: field list, extra instructions, document text."""
    field_lines = []
    for field in form_schema:
        line = f"- {field.label} (id: {field.id})"
        if field.synonyms:
            line += f" Synonyms: {', '.join(field.synonyms)}."
        line += f" Description: {field.description or 'none'}"
        if field.example:
            line += f" Example: {field.example}"
        field_lines.append(line)

    return f"""Extract the values of the form fields below from the document. If a value cannot be
determined, leave it out and explain why in the group rationale.

Additional instructions: {instructions or 'none'}

Fields:
{chr(10).join(field_lines)}

Document:
{document.content}
{_OUTPUT_RULES}
"""


def agent_json_schema() -> dict:
    """JSON Schema constraining the model's response."""
    candidate = {
        "anyOf": [
            {"type": "string"},
            {
                "type": "object",
                "properties": {
                    "value": {"type": "string"},
                    "confidence": {"type": ["number", "null"]},
                    "rationale": {"type": ["string", "null"]},
                    "sourceText": {"type": ["string", "null"]},
                },
                "required": ["value"],
            },
        ],
    }
    return {
        "type": "object",
        "properties": {
            "backend": {"type": "string"},
            "summary": {"type": "string"},
            "diagnostics": {"type": "array", "items": {"type": "string"}},
            "extractedPairs": {
                "type": "object",
                "additionalProperties": {"type": "string"},
            },
            "fieldGroups": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "label": {"type": ["string", "null"]},
                        "confidence": {"type": ["number", "null"]},
                        "rationale": {"type": ["string", "null"]},
                        "fieldCandidates": {
                            "type": "object",
                            "additionalProperties": {"type": "array", "items": candidate},
                        },
                    },
                    "required": ["id", "fieldCandidates"],
                },
            },
            "actions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string"},
                        "target": {"type": "string"},
                        "payload": {"type": "object"},
                        "confidence": {"type": "number"},
                        "rationale": {"type": "string"},
                    },
                    "required": ["type", "confidence"],
                },
            },
        },
        "required": ["fieldGroups", "extractedPairs"],
    }
