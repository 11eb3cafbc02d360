"""
Endpoint handlers for the proxy server.
"""
from .auth import router as auth_router
from .health import router as health_router
from .models import router as models_router
from .responses import router as responses_router

__all__ = [
    'auth_router',
    'health_router',
    'models_router',
    'responses_router',
]
