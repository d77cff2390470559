"""Project type detection."""

from .detector import detect_project
from .profiles import ECOSYSTEM_RULES, GENERIC_RULE, KNOWN_KINDS, ProjectProfile, rule_for_kind

__all__ = [
    "ECOSYSTEM_RULES",
    "GENERIC_RULE",
    "KNOWN_KINDS",
    "ProjectProfile",
    "detect_project",
    "rule_for_kind",
]
