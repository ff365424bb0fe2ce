import asyncio
import random

import httpx
import pytest

from bloom.core.errors import NoResultsError, UpstreamError
from bloom.core.plantnet import PlantNetClient, select_best_result, summarize
from bloom.core.uploads import ImageInput


def _result(name, score=None):
    r = {"species": {"scientificNameWithoutAuthor": name}}
    if score is not None:
        r["score"] = score
    return r


def test_select_best_picks_max_score():
    results = [_result("a", 0.1), _result("b", 0.7), _result("c", 0.3)]
    assert select_best_result(results)["species"]["scientificNameWithoutAuthor"] == "b"


def test_select_best_never_below_any_other_score():
    rng = random.Random(7)
    for _ in range(50):
        results = [_result(str(i), round(rng.random(), 2)) for i in range(rng.randint(1, 8))]
        best = select_best_result(results)
        assert all(best["score"] >= r["score"] for r in results)


def test_select_best_tie_keeps_first():
    results = [_result("first", 0.5), _result("second", 0.5)]
    assert select_best_result(results)["species"]["scientificNameWithoutAuthor"] == "first"


def test_select_best_without_scores_defaults_to_first():
    results = [_result("first"), _result("second")]
    assert select_best_result(results)["species"]["scientificNameWithoutAuthor"] == "first"


def test_select_best_scored_entry_beats_unscored_first():
    results = [_result("unscored"), _result("scored", 0.2)]
    assert select_best_result(results)["species"]["scientificNameWithoutAuthor"] == "scored"


def test_select_best_empty_is_no_results():
    with pytest.raises(NoResultsError) as ei:
        select_best_result([])
    assert ei.value.status_code == 404


def test_summarize_extracts_plantnet_block():
    raw = {
        "results": [
            {"score": 0.2, "species": {"scientificNameWithoutAuthor": "Philodendron"}},
            {
                "score": 0.87,
                "species": {
                    "scientificNameWithoutAuthor": "Monstera deliciosa",
                    "commonNames": ["Swiss cheese plant"],
                    "family": {"scientificNameWithoutAuthor": "Araceae"},
                },
            },
        ]
    }
    out = summarize(raw)
    assert out["raw"] is raw
    assert out["best_result"] is raw["results"][1]
    assert out["scientific_name"] == "Monstera deliciosa"
    assert out["common_names"] == ["Swiss cheese plant"]
    assert out["family"] == "Araceae"
    assert out["score"] == 0.87


@pytest.mark.parametrize("raw", [{}, {"results": []}, {"results": None}])
def test_summarize_without_results_is_no_results(raw):
    with pytest.raises(NoResultsError):
        summarize(raw)


@pytest.fixture
def images(tmp_path):
    out = []
    for i, organ in enumerate(["leaf", "flower"]):
        p = tmp_path / f"img{i}.jpg"
        p.write_bytes(b"\xff\xd8fake-jpeg-%d" % i)
        out.append(ImageInput(path=str(p), filename=p.name, content_type="image/jpeg", organ=organ))
    return out


def test_identify_sends_multipart_with_key_in_query(images):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = request.read()
        return httpx.Response(200, json={"results": [_result("x", 0.4)]})

    client = PlantNetClient("secret-key", project="all", transport=httpx.MockTransport(handler))
    raw = asyncio.run(client.identify(images))

    assert raw["results"][0]["score"] == 0.4
    assert seen["url"].path == "/v2/identify/all"
    assert seen["url"].params["api-key"] == "secret-key"
    body = seen["body"]
    assert body.count(b'name="images"') == 2
    assert body.count(b'name="organs"') == 2
    assert b"leaf" in body and b"flower" in body
    assert b"\xff\xd8fake-jpeg-0" in body
    assert b"\xff\xd8fake-jpeg-1" in body


def test_identify_non_2xx_is_upstream_error_without_key(images):
    def handler(request):
        return httpx.Response(401, text="Invalid api-key=secret-key")

    client = PlantNetClient("secret-key", transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError) as ei:
        asyncio.run(client.identify(images))

    err = ei.value
    assert err.upstream_status == 401
    assert err.status_code == 502
    assert "secret-key" not in (err.body or "")
    assert err.message == "Identification failed"


def test_identify_species_not_found_is_no_results(images):
    client = PlantNetClient(
        "k",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(404, json={"statusCode": 404, "message": "Species not found"})
        ),
    )
    with pytest.raises(NoResultsError) as ei:
        asyncio.run(client.identify(images))
    assert ei.value.status_code == 404
    assert ei.value.to_dict()["code"] == "NO_RESULTS"


def test_identify_5xx_status_is_passed_through(images):
    client = PlantNetClient(
        "k", transport=httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
    )
    with pytest.raises(UpstreamError) as ei:
        asyncio.run(client.identify(images))
    assert ei.value.status_code == 503


def test_identify_timeout_is_500(images):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = PlantNetClient("k", timeout=30, transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError) as ei:
        asyncio.run(client.identify(images))
    assert ei.value.status_code == 500
    assert ei.value.upstream_status is None


def test_identify_without_key_fails_at_request_time(images):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    client = PlantNetClient("", transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError):
        asyncio.run(client.identify(images))
    assert calls == []
