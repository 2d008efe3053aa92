"""Entity group normalization, scoring, and field-level group repair."""

import logging
from typing import NamedTuple

from models import AgentFormField, FieldGroup

from .confidence import (
    DEFAULT_POLICY,
    ConfidencePolicy,
    blend_confidence,
    clamp,
    coverage_ratio,
    is_finite_number,
    is_number,
    mean,
)
from .options import normalize_options
from .safe_string import to_display_string

logger = logging.getLogger(__name__)

NO_RATIONALE_PLACEHOLDER = "The model did not provide a rationale"

COALESCED_GROUP_ID = "entity_1"
RATIONALE_SEPARATOR = "；"


class ScoredGroup(NamedTuple):
    group: FieldGroup
    score: float


def normalize_group(
    raw: object,
    index: int,
    expected_field_count: int,
    policy: ConfidencePolicy = DEFAULT_POLICY,
    taken: set[str] | None = None,
) -> ScoredGroup | None:
    """Normalize one raw group and score it.

    The computed score is the mean best-candidate confidence scaled by how
    many of the expected form fields the group covers. A confidence declared
    by the model is averaged with it. Groups with no surviving candidates
    are dropped (None).

    ``taken`` holds ids already used in the result; a colliding id gets a
    numeric suffix and the final id is added to the set.
    """
    if not isinstance(raw, dict):
        return None

    raw_id = raw.get("id")
    group_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else f"group-{index + 1}"
    if taken is not None:
        group_id = _unique_id(group_id, taken)
    label = raw.get("label") if isinstance(raw.get("label"), str) else None
    declared = clamp(raw["confidence"]) if is_number(raw.get("confidence")) else None

    field_candidates = {}
    raw_candidates = raw.get("fieldCandidates")
    if isinstance(raw_candidates, dict):
        for field_id, value in raw_candidates.items():
            options = normalize_options(value, group_id=group_id, group_label=label, policy=policy)
            if options:
                field_candidates[field_id] = options

    if not field_candidates:
        return None

    best = [
        options[0].confidence if options[0].confidence is not None else policy.min_confidence
        for options in field_candidates.values()
    ]
    computed = clamp(mean(best) * coverage_ratio(len(field_candidates), expected_field_count))
    confidence = blend_confidence(declared, computed)

    rationale = to_display_string(raw.get("rationale"))
    if not rationale or not rationale.strip():
        rationale = NO_RATIONALE_PLACEHOLDER

    group = FieldGroup(
        id=group_id,
        label=label,
        confidence=confidence,
        rationale=rationale,
        field_candidates=field_candidates,
    )
    if taken is not None:
        taken.add(group_id)
    return ScoredGroup(group=group, score=confidence)


def _unique_id(group_id: str, taken: set[str]) -> str:
    if group_id not in taken:
        return group_id
    suffix = 2
    while f"{group_id}-{suffix}" in taken:
        suffix += 1
    return f"{group_id}-{suffix}"


def coalesce_field_level_groups(groups: list, form_schema: list[AgentFormField]) -> list:
    """Merge one-group-per-field answers back into a single entity.

    Only triggers when every group holds exactly one candidate key, each key
    is a known form field, and no field appears twice. Otherwise the input
    is returned unchanged.
    """
    if len(groups) <= 1:
        return groups

    allowed = {field.id for field in form_schema}
    seen: set[str] = set()
    field_level: list[tuple[dict, str]] = []

    for group in groups:
        if not isinstance(group, dict):
            return groups
        candidates = group.get("fieldCandidates")
        if not isinstance(candidates, dict) or len(candidates) != 1:
            return groups
        field_id = next(iter(candidates))
        if field_id not in allowed or field_id in seen:
            return groups
        seen.add(field_id)
        field_level.append((group, field_id))

    if not field_level or len(field_level) > len(allowed):
        return groups

    merged_candidates: dict[str, list] = {}
    rationales = []
    confidences = []
    label = None

    for group, field_id in field_level:
        raw_label = group.get("label")
        if label is None and isinstance(raw_label, str) and raw_label.strip():
            label = raw_label.strip()

        value = group["fieldCandidates"][field_id]
        merged_candidates.setdefault(field_id, []).extend(value if isinstance(value, list) else [value])

        rationale = to_display_string(group.get("rationale"))
        if rationale and rationale.strip():
            rationales.append(rationale.strip())

        confidence = group.get("confidence")
        if is_finite_number(confidence):
            confidences.append(clamp(confidence))

    merged: dict = {
        "id": COALESCED_GROUP_ID,
        "label": label,
        "fieldCandidates": merged_candidates,
    }
    if rationales:
        merged["rationale"] = RATIONALE_SEPARATOR.join(rationales)
    if confidences:
        merged["confidence"] = mean(confidences)

    logger.info("Coalesced %d field-level groups into %s", len(field_level), COALESCED_GROUP_ID)
    return [merged]
