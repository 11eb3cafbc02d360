"""
Liveness endpoint.
"""
import time

from fastapi import APIRouter, Depends

from providers import CodexProvider
from ..dependencies import get_provider

router = APIRouter()


@router.get("/health")
async def health_check(provider: CodexProvider = Depends(get_provider)):
    """Liveness plus whether a ChatGPT login is available"""
    return {
        "status": "healthy",
        "provider": provider.provider_id,
        "authenticated": provider.is_authenticated(),
        "timestamp": time.time(),
    }
