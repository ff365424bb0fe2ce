import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx
from starlette.concurrency import run_in_threadpool

from bloom.core.errors import NoResultsError, UpstreamError, redact_key
from bloom.core.uploads import ImageInput

logger = logging.getLogger(__name__)

PROVIDER = "plantnet"


def _score(result: Dict[str, Any]) -> Optional[float]:
    s = result.get("score") if isinstance(result, dict) else None
    if isinstance(s, bool) or not isinstance(s, (int, float)):
        return None
    return float(s)


def select_best_result(results: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Highest-scoring result, scanning left to right.
    Ties keep the earlier entry; results without a numeric score never displace the current best,
    so the first entry wins when the provider omits scores.
    """
    if not results:
        raise NoResultsError()

    best = results[0]
    best_score = _score(best)
    for cur in results[1:]:
        cur_score = _score(cur)
        if cur_score is not None and (best_score is None or cur_score > best_score):
            best, best_score = cur, cur_score
    return best


def summarize(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the "plantnet" block returned to the client from a raw /v2/identify payload.
    The full raw payload is passed through for client-side display/debugging.
    """
    results = raw.get("results") if isinstance(raw, dict) else None
    if not isinstance(results, list) or not results:
        raise NoResultsError()

    best = select_best_result(results)
    species = best.get("species") or {}
    family = species.get("family") or {}

    return {
        "raw": raw,
        "best_result": best,
        "scientific_name": species.get("scientificNameWithoutAuthor") or "",
        "common_names": [str(x) for x in (species.get("commonNames") or []) if str(x).strip()],
        "family": family.get("scientificNameWithoutAuthor") or "",
        "score": _score(best),
    }


class PlantNetClient:
    """
    Thin async client for PlantNet's multipart identify endpoint.
    The API key travels in the query string, so every error message is redacted.
    """

    def __init__(
        self,
        api_key: str,
        project: str = "all",
        api_base: str = "https://my-api.plantnet.org/v2/identify",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.project = project or "all"
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.api_base}/{self.project}"

    async def identify(self, images: Sequence[ImageInput]) -> Dict[str, Any]:
        """
        POSTs images + organs (parallel repeated fields) and returns PlantNet's raw JSON.
        """
        if not self.api_key:
            raise UpstreamError(PROVIDER, "Identification failed: PLANTNET_API_KEY is not set")

        files: List[tuple] = []
        for img in images:
            content = await run_in_threadpool(Path(img.path).read_bytes)
            files.append(("images", (img.filename, content, img.content_type)))
        data = {"organs": [img.organ for img in images]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(self.url, params={"api-key": self.api_key}, files=files, data=data)
        except httpx.TimeoutException as e:
            logger.error("PlantNet timed out after %ss: %s", self.timeout, type(e).__name__)
            raise UpstreamError(PROVIDER, "Identification failed: PlantNet request timed out")
        except httpx.HTTPError as e:
            logger.error("PlantNet request error: %s", redact_key(str(e)))
            raise UpstreamError(PROVIDER, "Identification failed: PlantNet unreachable")

        if r.status_code == 404:
            # PlantNet answers "Species not found" with a 404
            logger.info("PlantNet found no species for %d image(s)", len(images))
            raise NoResultsError()

        if r.status_code >= 400:
            safe_body = redact_key(r.text)[:2000]
            logger.error("PlantNet request failed: %s\nBODY:\n%s", r.status_code, safe_body)
            # 4xx from PlantNet is still our upstream's fault; keep our answer 5xx
            raise UpstreamError(
                PROVIDER,
                "Identification failed",
                status_code=r.status_code if r.status_code >= 500 else 502,
                upstream_status=r.status_code,
                body=safe_body,
            )

        try:
            return r.json()
        except ValueError:
            raise UpstreamError(
                PROVIDER,
                "Identification failed: PlantNet returned non-JSON",
                upstream_status=r.status_code,
            )
