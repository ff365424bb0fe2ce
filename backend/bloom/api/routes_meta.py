import os
from fastapi import APIRouter, Depends

from bloom.core.config import Settings, get_settings

router = APIRouter(tags=["meta"])


@router.get("/")
def root():
    return {
        "name": "BloomBuddy API",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "version": "/version",
    }


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/version")
def version(settings: Settings = Depends(get_settings)):
    return {
        "version": settings.APP_VERSION,
        "build": settings.BUILD_ID,
        # set by the hosting platform on deploy, absent locally
        "git_commit": os.environ.get("VERCEL_GIT_COMMIT_SHA") or os.environ.get("RENDER_GIT_COMMIT"),
    }
