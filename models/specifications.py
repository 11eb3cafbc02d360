"""Model specifications and registry entry definitions"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .reasoning import REASONING_LABELS


@dataclass(frozen=True)
class ModelFamilySpec:
    base_model: str
    name: str
    description: str
    context_window: int
    max_output_tokens: Optional[int]
    # Effort used by the bare family id (e.g. "gpt-5.1-codex")
    default_effort: str
    # Efforts exposed as "<base_model>-<effort>" variants, in listing order
    variant_efforts: Tuple[str, ...]


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    name: str
    base_model: str
    reasoning_effort: str
    context_window: int
    max_output_tokens: Optional[int] = None
    description: Optional[str] = None

    def to_model_listing(self) -> Dict[str, Any]:
        """Host-facing model entry"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "contextWindow": self.context_window,
            "maxOutputTokens": self.max_output_tokens,
            "capabilities": {
                "streaming": True,
                "reasoning": self.reasoning_effort != "none",
                "functionCalling": True,
            },
            "providerOptions": {
                "reasoning": self.reasoning_effort,
                "baseModel": self.base_model,
            },
        }

    def to_openai_listing(self, created: int) -> Dict[str, Any]:
        """OpenAI /v1/models style entry"""
        data: Dict[str, Any] = {
            "id": self.id,
            "object": "model",
            "created": created,
            "owned_by": "openai",
            "context_length": self.context_window,
        }
        if self.max_output_tokens:
            data["max_completion_tokens"] = self.max_output_tokens
        if self.reasoning_effort != "none":
            data["reasoning_capable"] = True
            data["reasoning_effort"] = self.reasoning_effort
        return data


def variant_name(family: ModelFamilySpec, effort: str) -> str:
    return f"{family.name} ({REASONING_LABELS[effort]} Reasoning)"


MODEL_FAMILIES: List[ModelFamilySpec] = [
    ModelFamilySpec(
        base_model="gpt-5.2",
        name="GPT-5.2",
        description="GPT-5.2 general purpose model",
        context_window=128_000,
        max_output_tokens=None,
        default_effort="none",
        variant_efforts=("low", "medium", "high", "xhigh"),
    ),
    ModelFamilySpec(
        base_model="gpt-5.2-codex",
        name="GPT-5.2 Codex",
        description="GPT-5.2 Codex - optimized for coding tasks",
        context_window=272_000,
        max_output_tokens=128_000,
        default_effort="medium",
        variant_efforts=("low", "high", "xhigh"),
    ),
    ModelFamilySpec(
        base_model="gpt-5.1-codex-max",
        name="GPT-5.1 Codex Max",
        description="GPT-5.1 Codex Max - maximum capability variant",
        context_window=200_000,
        max_output_tokens=64_000,
        default_effort="high",
        variant_efforts=("low", "medium", "xhigh"),
    ),
    ModelFamilySpec(
        base_model="gpt-5.1-codex",
        name="GPT-5.1 Codex",
        description="GPT-5.1 Codex - balanced coding model",
        context_window=200_000,
        max_output_tokens=64_000,
        default_effort="medium",
        variant_efforts=("low", "high"),
    ),
    ModelFamilySpec(
        base_model="gpt-5.1-codex-mini",
        name="GPT-5.1 Codex Mini",
        description="GPT-5.1 Codex Mini - fast and efficient",
        context_window=128_000,
        max_output_tokens=32_000,
        default_effort="medium",
        variant_efforts=("high",),
    ),
    ModelFamilySpec(
        base_model="gpt-5.1",
        name="GPT-5.1",
        description="GPT-5.1 general purpose model",
        context_window=128_000,
        max_output_tokens=None,
        default_effort="none",
        variant_efforts=("low", "medium", "high"),
    ),
]
