"""Model registry for the Codex variants exposed to hosts"""

from typing import Any, Dict, List, Optional
import logging

from .reasoning import DEFAULT_REASONING_EFFORT, REASONING_EFFORTS
from .specifications import MODEL_FAMILIES, ModelDescriptor, ModelFamilySpec, variant_name

logger = logging.getLogger(__name__)

# Fixed "created" stamp for the OpenAI style listing
MODELS_CREATED = 1763424000

MODEL_REGISTRY: Dict[str, ModelDescriptor] = {}
CODEX_MODELS: List[ModelDescriptor] = []


def supports_reasoning_level(model_id: str, level: str) -> bool:
    """Check if a model accepts a reasoning effort

    Codex models never accept "none"; mini models accept only medium and high.
    """
    if level not in REASONING_EFFORTS:
        return False

    base_model = get_base_model_id(model_id)

    if "codex" in base_model and level == "none":
        return False

    if "mini" in base_model:
        return level in ("medium", "high")

    return True


def _register_model(entry: ModelDescriptor) -> None:
    """Register a model, rejecting duplicate ids and disallowed efforts"""
    if entry.id in MODEL_REGISTRY:
        raise ValueError(f"Duplicate model id in registry: {entry.id}")
    MODEL_REGISTRY[entry.id] = entry
    CODEX_MODELS.append(entry)
    if not supports_reasoning_level(entry.id, entry.reasoning_effort):
        raise ValueError(
            f"Model {entry.id} declares reasoning effort '{entry.reasoning_effort}' "
            f"which {entry.base_model} does not support"
        )


def _build_family(family: ModelFamilySpec) -> None:
    _register_model(
        ModelDescriptor(
            id=family.base_model,
            name=family.name,
            description=family.description,
            base_model=family.base_model,
            reasoning_effort=family.default_effort,
            context_window=family.context_window,
            max_output_tokens=family.max_output_tokens,
        )
    )
    for effort in family.variant_efforts:
        _register_model(
            ModelDescriptor(
                id=f"{family.base_model}-{effort}",
                name=variant_name(family, effort),
                base_model=family.base_model,
                reasoning_effort=effort,
                context_window=family.context_window,
                max_output_tokens=family.max_output_tokens,
            )
        )


def _build_registry() -> None:
    for family in MODEL_FAMILIES:
        _build_family(family)
    logger.debug(f"Model registry built with {len(MODEL_REGISTRY)} Codex variants")


def get_model_info(model_id: str) -> Optional[ModelDescriptor]:
    return MODEL_REGISTRY.get(model_id)


def get_base_model_id(model_id: str) -> str:
    """Backend model name for a variant id; unknown ids pass through unchanged"""
    model = MODEL_REGISTRY.get(model_id)
    return model.base_model if model else model_id


def get_reasoning_effort(model_id: str) -> str:
    """Reasoning effort for a variant id; unknown ids get the default effort"""
    model = MODEL_REGISTRY.get(model_id)
    return model.reasoning_effort if model else DEFAULT_REASONING_EFFORT


def list_models() -> List[ModelDescriptor]:
    return list(CODEX_MODELS)


def openai_models_list() -> List[Dict[str, Any]]:
    return [model.to_openai_listing(MODELS_CREATED) for model in CODEX_MODELS]


_build_registry()
