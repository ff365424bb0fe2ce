"""
BloomBuddy API - FastAPI Main Entry

✅ LOCAL:
    cd backend
    source .venv/bin/activate
    python -m uvicorn bloom.main:app --reload --host 0.0.0.0 --port 8000

✅ ENV (backend/.env or process env):
    PLANTNET_API_KEY=...
    LLM_PROVIDER=openai            # or gemini
    OPENAI_API_KEY=...             # OpenRouter key by default (OPENAI_BASE_URL)
    GEMINI_API_KEY=...             # when LLM_PROVIDER=gemini

✅ TEST FROM THIS MACHINE:
    curl -i http://127.0.0.1:8000/health
    curl -i "http://127.0.0.1:8000/api/identify?name=Aloe%20vera"
    curl -i -F images=@leaf.jpg -F organs=leaf http://127.0.0.1:8000/api/identify
    curl -i -H "Content-Type: application/json" \
         -d '{"latitude": 12.97, "longitude": 77.59, "address": "Bengaluru"}' \
         http://127.0.0.1:8000/api/recommend

✅ TEST FROM PHONE (Expo app, same WiFi):
    Point API_BASE_URL in the app at http://<LAN_IP>:8000
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bloom.core.config import get_settings
from bloom.core.errors import BloomError
from bloom.core.logging import configure_logging

# ✅ Routers
from bloom.api.routes_identify import router as identify_router
from bloom.api.routes_meta import router as meta_router
from bloom.api.routes_recommend import router as recommend_router

logger = logging.getLogger("bloom.main")


async def bloom_error_handler(request: Request, exc: BloomError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.error_code, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="BloomBuddy API",
        version=settings.APP_VERSION,
        description="Backend API for the BloomBuddy app (Identify + Recommend)",
    )

    # ✅ CORS
    # NOTE:
    # - the Expo app does NOT require CORS
    # - Expo web / Swagger docs do
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Every BloomError becomes {"error": ..., "code": ...} with its own status
    app.add_exception_handler(BloomError, bloom_error_handler)

    # ✅ Mount routers
    app.include_router(meta_router)
    app.include_router(identify_router)
    app.include_router(recommend_router)

    return app


app = create_app()
