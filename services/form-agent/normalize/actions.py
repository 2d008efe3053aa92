"""Follow-up action normalization."""

from models import AgentAction

from .confidence import DEFAULT_POLICY, ConfidencePolicy, clamp, is_number


def normalize_action(raw: object, policy: ConfidencePolicy = DEFAULT_POLICY) -> AgentAction | None:
    """Return an AgentAction, or None when raw has no string ``type``."""
    if not isinstance(raw, dict):
        return None

    action_type = raw.get("type")
    if not isinstance(action_type, str):
        return None

    target = raw.get("target")
    payload = raw.get("payload")
    confidence = raw.get("confidence")
    rationale = raw.get("rationale")

    return AgentAction(
        type=action_type,
        target=target if isinstance(target, str) else None,
        payload=payload if isinstance(payload, dict) else None,
        confidence=clamp(confidence) if is_number(confidence) else policy.default_action_confidence,
        rationale=rationale if isinstance(rationale, str) else None,
    )
