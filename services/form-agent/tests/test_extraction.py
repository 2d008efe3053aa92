"""Tests for the analyze orchestrator and prompt construction."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from extraction import analyze_document, message_content
from llm_client import LLMServiceError, LLMServiceTimeout
from models import AgentAnalyzeOptions, AgentDocument, AnalyzeRequest
from normalize.confidence import ConfidencePolicy
from prompts import agent_json_schema, build_prompt


@pytest.fixture
def analyze_request(contact_schema) -> AnalyzeRequest:
    return AnalyzeRequest(
        document=AgentDocument(kind="text", content="Alice Zhang, alice@example.com", filename="cv.txt"),
        options=AgentAnalyzeOptions(form_schema=contact_schema, instructions="Prefer work email"),
    )


@pytest.fixture
def mock_client(chat_response):
    client = MagicMock()
    client.model = "qwen-plus"
    client.chat.return_value = chat_response("")
    return client


class TestMessageContent:
    def test_string_content(self, chat_response):
        assert message_content(chat_response("hi")) == "hi"

    def test_chunked_content(self, chat_response):
        chunks = [{"type": "text", "text": "hi"}]
        assert message_content(chat_response(chunks)) == chunks

    @pytest.mark.parametrize("response", [
        None,
        {},
        {"choices": []},
        {"choices": "x"},
        {"choices": [None]},
        {"choices": [{"message": "x"}]},
        {"choices": [{"message": {"role": "assistant"}}]},
    ])
    def test_missing_content(self, response):
        assert message_content(response) is None


class TestAnalyzeDocument:
    def test_successful_analysis(self, analyze_request, mock_client, chat_response, person_payload_json):
        mock_client.chat.return_value = chat_response(person_payload_json)

        result = analyze_document(analyze_request, mock_client)

        assert result.backend == "dashscope:qwen-plus"
        assert result.field_groups[0].id == "person-1"
        assert result.extracted_pairs == {"name": "Alice Zhang"}
        prompt = mock_client.chat.call_args.args[0]
        assert "Alice Zhang, alice@example.com" in prompt
        assert "Prefer work email" in prompt

    def test_fenced_answer(self, analyze_request, mock_client, chat_response, fenced_group_response):
        mock_client.chat.return_value = chat_response(fenced_group_response)
        result = analyze_document(analyze_request, mock_client)
        assert [g.id for g in result.field_groups] == ["g1"]

    def test_empty_answer(self, analyze_request, mock_client):
        result = analyze_document(analyze_request, mock_client)
        assert result.field_groups == []
        assert result.actions == []
        assert result.extracted_pairs == {}

    def test_policy_override(self, analyze_request, mock_client, chat_response):
        content = '{"fieldGroups": [{"id": "g", "fieldCandidates": {"name": [{"value": "Al", "confidence": 0.6}]}}]}'
        mock_client.chat.return_value = chat_response(content)

        assert analyze_document(analyze_request, mock_client).field_groups == []
        relaxed = analyze_document(analyze_request, mock_client, policy=ConfidencePolicy(min_confidence=0.5))
        assert [g.id for g in relaxed.field_groups] == ["g"]

    @pytest.mark.parametrize("error", [LLMServiceTimeout("slow"), LLMServiceError("bad")])
    def test_llm_errors_propagate(self, analyze_request, mock_client, error):
        mock_client.chat.side_effect = error
        with pytest.raises(type(error)):
            analyze_document(analyze_request, mock_client)


class TestPrompts:
    def test_prompt_lists_fields(self, analyze_request, contact_schema):
        prompt = build_prompt(analyze_request.document, contact_schema)
        assert "- Full name (id: name) Synonyms: name, full name." in prompt
        assert "Description: Primary contact email" in prompt
        assert "Example: ACME Corp" in prompt
        assert "Additional instructions: none" in prompt
        assert "fieldCandidates" in prompt

    def test_schema_requires_groups(self):
        schema = agent_json_schema()
        assert "fieldGroups" in schema["required"]
        group = schema["properties"]["fieldGroups"]["items"]
        assert group["required"] == ["id", "fieldCandidates"]
