"""
FastAPI application serving the Codex models over the OpenAI Responses API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .dependencies import get_provider
from .endpoints import auth_router, health_router, models_router, responses_router
from .middleware import log_requests_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load stored tokens before the first request"""
    provider = application.dependency_overrides.get(get_provider, get_provider)()
    await provider.initialize()
    if provider.is_authenticated():
        logger.info("Loaded ChatGPT credentials")
    else:
        logger.warning("Not logged in - run 'codex-proxy login' before sending requests")
    yield


app = FastAPI(title="ChatGPT Codex Proxy", version="1.0.0", lifespan=lifespan)
app.middleware("http")(log_requests_middleware)

for router in (health_router, models_router, auth_router, responses_router):
    app.include_router(router)
