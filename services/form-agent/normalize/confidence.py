"""Confidence thresholds and scoring heuristics.

Every score the normalizer produces goes through one of the small pure
functions below, so the scoring policy can be tested on its own.
"""

import math

from pydantic import BaseModel, ConfigDict

MIN_CONFIDENCE = 0.75

# Bare-string candidates carry no declared confidence; longer text is
# treated as more specific, up to the cap. Any non-empty string clears
# MIN_CONFIDENCE with these defaults.
OPTION_CONF_BASE = 0.75
OPTION_CONF_CAP = 0.85
OPTION_CONF_STEP = 0.002

DEFAULT_ACTION_CONFIDENCE = 0.5


class ConfidencePolicy(BaseModel):
    """Read-only thresholds injected into the normalizers."""

    model_config = ConfigDict(frozen=True)

    min_confidence: float = MIN_CONFIDENCE
    option_conf_base: float = OPTION_CONF_BASE
    option_conf_cap: float = OPTION_CONF_CAP
    option_conf_step: float = OPTION_CONF_STEP
    default_action_confidence: float = DEFAULT_ACTION_CONFIDENCE


DEFAULT_POLICY = ConfidencePolicy()


def is_number(value: object) -> bool:
    """True for int/float values, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: object) -> bool:
    """True for numbers representable as a finite float."""
    if not is_number(value):
        return False
    try:
        return math.isfinite(value)  # type: ignore[arg-type]
    except OverflowError:
        return False


def clamp(n: object) -> float:
    """Clamp into [0, 1]; non-finite, out-of-float-range or non-numeric input becomes 0."""
    if not is_finite_number(n):
        return 0.0
    return max(0.0, min(1.0, float(n)))  # type: ignore[arg-type]


def inferred_string_confidence(length: int, policy: ConfidencePolicy = DEFAULT_POLICY) -> float:
    return min(policy.option_conf_cap, policy.option_conf_base + length * policy.option_conf_step)


def coverage_ratio(field_count: int, expected_field_count: int) -> float:
    """Share of the expected form fields a group actually populated."""
    if expected_field_count <= 0:
        return 1.0
    return min(1.0, field_count / expected_field_count)


def mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def blend_confidence(declared: float | None, computed: float) -> float:
    """Average a model-declared confidence with the computed score."""
    if declared is None:
        return computed
    return clamp((declared + computed) / 2)
