"""Assemble the final AnalyzeResult from a parsed model payload."""

import logging

from models import AgentFormField, AnalyzeResult

from .actions import normalize_action
from .confidence import DEFAULT_POLICY, ConfidencePolicy
from .groups import coalesce_field_level_groups, normalize_group

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "dashscope"


def normalize_agent_result(
    payload: object,
    form_schema: list[AgentFormField],
    default_backend: str = DEFAULT_BACKEND,
    policy: ConfidencePolicy = DEFAULT_POLICY,
) -> AnalyzeResult:
    """Build an AnalyzeResult, degrading every malformed part to a default."""
    record = payload if isinstance(payload, dict) else {}

    backend = record.get("backend")
    summary = record.get("summary")

    diagnostics = None
    if isinstance(record.get("diagnostics"), list):
        diagnostics = [item for item in record["diagnostics"] if isinstance(item, str)]

    extracted_pairs = {}
    if isinstance(record.get("extractedPairs"), dict):
        extracted_pairs = {
            key: value
            for key, value in record["extractedPairs"].items()
            if isinstance(value, str)
        }

    actions = []
    if isinstance(record.get("actions"), list):
        for item in record["actions"]:
            action = normalize_action(item, policy=policy)
            if action is not None:
                actions.append(action)

    raw_groups = record.get("groups")
    if not isinstance(raw_groups, list):
        raw_groups = record.get("fieldGroups")
    if not isinstance(raw_groups, list):
        raw_groups = []

    raw_groups = coalesce_field_level_groups(raw_groups, form_schema)

    scored = []
    taken: set[str] = set()
    for index, item in enumerate(raw_groups):
        normalized = normalize_group(item, index, len(form_schema), policy=policy, taken=taken)
        if normalized is not None:
            scored.append(normalized)
    scored.sort(key=lambda entry: entry.score, reverse=True)
    field_groups = [entry.group for entry in scored]

    if len(field_groups) < len(raw_groups):
        logger.debug("Dropped %d empty or malformed groups", len(raw_groups) - len(field_groups))

    return AnalyzeResult(
        backend=backend if isinstance(backend, str) else default_backend,
        summary=summary if isinstance(summary, str) else None,
        diagnostics=diagnostics,
        extracted_pairs=extracted_pairs,
        actions=actions,
        field_groups=field_groups,
        auto_select_group_id=field_groups[0].id if len(field_groups) == 1 else None,
    )


def choose_initial_values(result: AnalyzeResult) -> dict[str, str]:
    """Best candidate value per field when exactly one group was found."""
    if len(result.field_groups) != 1:
        return {}
    group = result.field_groups[0]
    return {
        field_id: candidates[0].value
        for field_id, candidates in group.field_candidates.items()
        if candidates and candidates[0].value
    }
