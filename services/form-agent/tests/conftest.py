"""Shared test fixtures for form agent tests."""

import json
import sys
from pathlib import Path

import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import AgentFormField  # noqa: E402


@pytest.fixture
def contact_schema() -> list[AgentFormField]:
    """Four-field contact form."""
    return [
        AgentFormField(id="name", label="Full name", synonyms=["name", "full name"]),
        AgentFormField(id="email", label="Email", description="Primary contact email"),
        AgentFormField(id="phone", label="Phone"),
        AgentFormField(id="company", label="Company", example="ACME Corp"),
    ]


@pytest.fixture
def name_schema() -> list[AgentFormField]:
    return [AgentFormField(id="name", label="Name")]


@pytest.fixture
def fenced_group_response() -> str:
    """Model answer with the JSON wrapped in prose and a ```json fence."""
    return (
        'Here is the result: ```json\n'
        '{"fieldGroups":[{"id":"g1","confidence":0.9,"rationale":"clear",'
        '"fieldCandidates":{"name":["Alice"]}}]}\n```'
    )


@pytest.fixture
def field_level_groups() -> list[dict]:
    """The one-group-per-field failure mode."""
    return [
        {"id": "a", "label": "Alice", "confidence": 0.8, "rationale": "name line",
         "fieldCandidates": {"name": [{"value": "Alice Zhang", "confidence": 0.9}]}},
        {"id": "b", "confidence": 0.6, "rationale": "email line",
         "fieldCandidates": {"email": [{"value": "alice@example.com", "confidence": 0.95}]}},
        {"id": "c",
         "fieldCandidates": {"phone": "+86 138 0000 0000"}},
    ]


@pytest.fixture
def chat_response():
    """Build a chat-completions response around the given message content."""

    def _build(content) -> dict:
        return {
            "id": "chatcmpl-test",
            "choices": [
                {"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": content}},
            ],
        }

    return _build


@pytest.fixture
def person_payload() -> dict:
    """Well-formed payload with one complete entity."""
    return {
        "summary": "Resume of Alice Zhang",
        "extractedPairs": {"name": "Alice Zhang", "age": 30},
        "fieldGroups": [
            {
                "id": "person-1",
                "label": "Alice",
                "confidence": 0.9,
                "rationale": "Header block",
                "fieldCandidates": {
                    "name": [{"value": "Alice Zhang", "confidence": 0.92}],
                    "email": [{"value": "alice@example.com", "confidence": 0.88}],
                    "phone": [{"value": "+86 138 0000 0000", "confidence": 0.8}],
                    "company": [{"value": "ACME", "confidence": 0.78}],
                },
            }
        ],
        "actions": [{"type": "create_contact", "target": "crm", "confidence": 0.7}],
    }


@pytest.fixture
def person_payload_json(person_payload: dict) -> str:
    return json.dumps(person_payload)
