"""Normalization engine: untrusted model output -> scored AnalyzeResult."""

from .actions import normalize_action
from .confidence import (
    DEFAULT_POLICY,
    MIN_CONFIDENCE,
    OPTION_CONF_BASE,
    OPTION_CONF_CAP,
    ConfidencePolicy,
    clamp,
)
from .groups import ScoredGroup, coalesce_field_level_groups, normalize_group
from .options import normalize_options
from .payload import extract_payload
from .result import choose_initial_values, normalize_agent_result
from .safe_string import to_display_string

__all__ = [
    "DEFAULT_POLICY",
    "MIN_CONFIDENCE",
    "OPTION_CONF_BASE",
    "OPTION_CONF_CAP",
    "ConfidencePolicy",
    "ScoredGroup",
    "choose_initial_values",
    "clamp",
    "coalesce_field_level_groups",
    "extract_payload",
    "normalize_action",
    "normalize_agent_result",
    "normalize_group",
    "normalize_options",
    "to_display_string",
]
