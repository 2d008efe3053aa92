"""Analyze orchestrator — build prompt, call the LLM, normalize its answer.

LLM client errors propagate to the HTTP layer; everything after the
model content arrives is handled by the normalize package and never raises.
"""

import logging
import time

from config import settings
from llm_client import DashScopeClient
from models import AnalyzeRequest, AnalyzeResult
from normalize import extract_payload, normalize_agent_result
from normalize.confidence import ConfidencePolicy
from prompts import build_prompt

logger = logging.getLogger(__name__)


def analyze_document(
    request: AnalyzeRequest,
    client: DashScopeClient,
    policy: ConfidencePolicy | None = None,
) -> AnalyzeResult:
    """Run the analyze pipeline: prompt -> LLM -> extract -> normalize."""
    start = time.monotonic()
    options = request.options

    prompt = build_prompt(request.document, options.form_schema, options.instructions)
    response = client.chat(prompt)
    inference_ms = int((time.monotonic() - start) * 1000)
    logger.info("LLM call completed in %dms", inference_ms)

    payload = extract_payload(message_content(response))
    result = normalize_agent_result(
        payload,
        options.form_schema,
        default_backend=f"dashscope:{client.model}",
        policy=policy or settings.confidence_policy(),
    )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Analysis finished in %dms: groups=%d actions=%d pairs=%d",
        elapsed_ms,
        len(result.field_groups),
        len(result.actions),
        len(result.extracted_pairs),
    )
    return result


def message_content(response: object) -> object:
    """Return ``choices[0].message.content`` of a chat response, or None."""
    if not isinstance(response, dict):
        return None
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")
