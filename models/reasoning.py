"""Reasoning effort levels accepted by the Codex backend"""

from typing import Dict, Literal, Tuple

ReasoningEffort = Literal["none", "low", "medium", "high", "xhigh"]

REASONING_EFFORTS: Tuple[str, ...] = ("none", "low", "medium", "high", "xhigh")

# Used for unknown model ids
DEFAULT_REASONING_EFFORT: ReasoningEffort = "medium"

# Display labels for variant names, e.g. "GPT-5.1 Codex (High Reasoning)"
REASONING_LABELS: Dict[str, str] = {
    "low": "Low",
    "medium": "Medium",
    "high": "High",
    "xhigh": "XHigh",
}


def is_reasoning_effort(value: object) -> bool:
    return isinstance(value, str) and value in REASONING_EFFORTS
