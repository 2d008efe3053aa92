"""Candidate normalization: raw strings/objects -> scored FieldOptions."""

from models import FieldOption

from .confidence import DEFAULT_POLICY, ConfidencePolicy, clamp, inferred_string_confidence, is_number
from .safe_string import to_display_string


def normalize_options(
    raw: object,
    group_id: str | None = None,
    group_label: str | None = None,
    policy: ConfidencePolicy = DEFAULT_POLICY,
) -> list[FieldOption]:
    """Turn a raw candidate (or list of candidates) into filtered, sorted options.

    Options below ``policy.min_confidence`` are dropped; an option without a
    confidence counts as 0 for that filter.
    """
    items = raw if isinstance(raw, list) else [raw]

    options = []
    for item in items:
        option = _to_option(item, group_id, group_label, policy)
        if option is not None:
            options.append(option)

    kept = [o for o in options if (o.confidence or 0.0) >= policy.min_confidence]
    kept.sort(key=lambda o: o.confidence or 0.0, reverse=True)
    return kept


def _to_option(
    item: object,
    group_id: str | None,
    group_label: str | None,
    policy: ConfidencePolicy,
) -> FieldOption | None:
    if isinstance(item, str):
        if not item.strip():
            return None
        return FieldOption(
            value=item,
            confidence=inferred_string_confidence(len(item), policy),
            group_id=group_id,
            group_label=group_label,
        )

    if not isinstance(item, dict):
        return None

    value = to_display_string(item.get("value"))
    if not value:
        return None

    confidence = item.get("confidence")
    source_text = item.get("sourceText")

    return FieldOption(
        value=value,
        confidence=clamp(confidence) if is_number(confidence) else None,
        rationale=to_display_string(item.get("rationale")),
        source_text=source_text if isinstance(source_text, str) else None,
        group_id=group_id,
        group_label=group_label,
    )
