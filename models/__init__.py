"""Codex model registry package"""

from .reasoning import (
    DEFAULT_REASONING_EFFORT,
    REASONING_EFFORTS,
    ReasoningEffort,
    is_reasoning_effort,
)
from .specifications import MODEL_FAMILIES, ModelDescriptor, ModelFamilySpec
from .registry import (
    CODEX_MODELS,
    MODEL_REGISTRY,
    get_base_model_id,
    get_model_info,
    get_reasoning_effort,
    list_models,
    openai_models_list,
    supports_reasoning_level,
)

__all__ = [
    "DEFAULT_REASONING_EFFORT",
    "REASONING_EFFORTS",
    "ReasoningEffort",
    "is_reasoning_effort",
    "MODEL_FAMILIES",
    "ModelDescriptor",
    "ModelFamilySpec",
    "CODEX_MODELS",
    "MODEL_REGISTRY",
    "get_base_model_id",
    "get_model_info",
    "get_reasoning_effort",
    "list_models",
    "openai_models_list",
    "supports_reasoning_level",
]
