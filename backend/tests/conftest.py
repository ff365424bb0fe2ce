import os
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from bloom.api.deps import get_llm_client, get_plantnet_client
from bloom.core.config import Settings, get_settings
from bloom.main import create_app


class FakePlantNet:
    """Records every identify() call; returns `raw` or raises `error`."""

    def __init__(self, raw: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.raw = raw if raw is not None else {"results": []}
        self.error = error
        self.calls: List[list] = []
        self.paths_seen: List[str] = []
        self.paths_existed: List[bool] = []

    async def identify(self, images):
        self.calls.append(list(images))
        for img in images:
            self.paths_seen.append(img.path)
            self.paths_existed.append(os.path.exists(img.path))
        if self.error is not None:
            raise self.error
        return self.raw


class FakeLLM:
    """Records prompts; replies with `reply` (a string, or None for an empty answer)."""

    def __init__(self, reply: Optional[str] = "{}", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system_prompt, user_prompt, *, max_tokens=800, temperature=0.2):
        self.calls.append(
            {
                "system": system_prompt,
                "user": user_prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


MONSTERA_RAW = {
    "query": {"project": "all", "organs": ["leaf"]},
    "results": [
        {
            "score": 0.87,
            "species": {
                "scientificNameWithoutAuthor": "Monstera deliciosa",
                "commonNames": ["Swiss cheese plant", "Split-leaf philodendron"],
                "family": {"scientificNameWithoutAuthor": "Araceae"},
            },
        }
    ],
}

MONSTERA_PROFILE = (
    '{"scientific_name": "Monstera deliciosa", "common_names": ["Swiss cheese plant"], '
    '"family": "Araceae", "category": "Houseplant", "short_description": "Climbing aroid.", '
    '"care": {"watering": "Weekly", "sunlight": "Bright indirect", "soil": "Chunky aroid mix", '
    '"temperature": "18-30C", "fertilizer": "Monthly in summer", "pruning": "Remove old leaves"}, '
    '"pests_and_diseases": "Spider mites", "medicinal_use": "None", "pet_friendly": "No", '
    '"typical_health_issues": "Yellow leaves from overwatering", "recommended_action": "Check roots"}'
)


@pytest.fixture
def upload_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def fake_plantnet():
    return FakePlantNet(raw=MONSTERA_RAW)


@pytest.fixture
def fake_llm():
    return FakeLLM(reply=MONSTERA_PROFILE)


@pytest.fixture
def client(upload_dir, fake_plantnet, fake_llm):
    app = create_app()
    settings = Settings(
        PLANTNET_API_KEY="test-plantnet",
        OPENAI_API_KEY="test-openai",
        UPLOAD_DIR=str(upload_dir),
    )
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_plantnet_client] = lambda: fake_plantnet
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
