"""
Model listing endpoints.
"""
from fastapi import APIRouter, HTTPException

from models import get_model_info, openai_models_list
from models.registry import MODELS_CREATED

router = APIRouter()


@router.get("/v1/models")
@router.get("/models")
async def list_models():
    """Every Codex variant in the OpenAI list format"""
    return {"object": "list", "data": openai_models_list()}


@router.get("/v1/models/{model_id}")
async def retrieve_model(model_id: str):
    model = get_model_info(model_id)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Model '{model_id}' not found")
    return model.to_openai_listing(MODELS_CREATED)
