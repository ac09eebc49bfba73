import asyncio
import json

import pytest
from starlette.requests import Request

import backend.main as main_module
from backend.app.config import DEFAULT_SEARCH_URL, load_settings
from backend.app.errors import InvalidRequestError, UpstreamError
from backend.app.models import SearchResultPage, VideoItem
from backend.app.services import kids_feed
from backend.app.services.aggregator import AggregationPolicy
from backend.app.services.curated_sources import DEFAULT_KIDS_CHANNELS, load_curated_channels


def make_request(ip: str = "127.0.0.1") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": [],
            "client": (ip, 8000),
            "query_string": b"",
            "server": ("test", 80),
            "scheme": "http",
            "http_version": "1.1",
        }
    )


def make_item(video_id: str) -> VideoItem:
    return VideoItem(url=f"/watch?v={video_id}", title=f"Video {video_id}")


def make_renderer(video_id: str) -> dict:
    return {
        "compactVideoRenderer": {
            "videoId": video_id,
            "title": {"simpleText": f"Video {video_id}"},
            "lengthText": {"simpleText": "1:00"},
        }
    }


class FakeClient:
    def __init__(self, search_root=None, browse_roots=None):
        self.search_root = search_root
        self.browse_roots = browse_roots or {}
        self.browsed: list[str] = []

    def execute_search(self, query):
        return self.search_root

    def execute_browse(self, browse_id):
        self.browsed.append(browse_id)
        root = self.browse_roots.get(browse_id)
        if isinstance(root, Exception):
            raise root
        return root


def test_health():
    assert main_module.health() == {"ok": True}


def test_kids_search_ignores_filter(monkeypatch):
    seen = {}

    def fake_search(client, query):
        seen["query"] = query
        return SearchResultPage(items=[make_item("a")])

    monkeypatch.setattr(main_module, "search_videos", fake_search)
    page = main_module.kids_search(q="bluey", filter="channels")

    assert seen["query"] == "bluey"
    dumped = page.model_dump(by_alias=True)
    assert dumped["nextPageToken"] is None
    assert dumped["corrected"] is False
    assert dumped["items"][0]["url"] == "/watch?v=a"


def test_kids_search_missing_query_is_invalid():
    with pytest.raises(InvalidRequestError, match="query is a required parameter"):
        main_module.kids_search(q=None)


@pytest.mark.parametrize("endpoint", ["kids_videos", "trending", "kids_channels"])
def test_region_is_required(endpoint):
    with pytest.raises(InvalidRequestError, match="region is a required parameter"):
        getattr(main_module, endpoint)(region=None)


def test_kids_videos_returns_home_feed(monkeypatch):
    monkeypatch.setattr(main_module, "home_videos", lambda client: [make_item("h1"), make_item("h2")])
    monkeypatch.setattr(main_module, "curated_videos", lambda *args, **kwargs: pytest.fail("no fallback expected"))

    assert [item.url for item in main_module.kids_videos(region="GB")] == ["/watch?v=h1", "/watch?v=h2"]


def test_kids_videos_falls_back_to_curated_on_upstream_error(monkeypatch):
    def failing_home(client):
        raise UpstreamError("YouTube Kids API returned error: 503", status_code=503)

    monkeypatch.setattr(main_module, "home_videos", failing_home)
    monkeypatch.setattr(main_module, "curated_videos", lambda client, sources: [make_item("c1")])

    assert [item.url for item in main_module.trending(region="")] == ["/watch?v=c1"]


def test_kids_videos_falls_back_to_curated_on_empty_home(monkeypatch):
    captured = {}

    def fake_curated(client, sources):
        captured["sources"] = sources
        return []

    monkeypatch.setattr(main_module, "home_videos", lambda client: [])
    monkeypatch.setattr(main_module, "curated_videos", fake_curated)

    assert main_module.kids_videos(region="US") == []
    assert captured["sources"] == main_module.CURATED_CHANNELS


def test_invalid_request_handler():
    response = asyncio.run(
        main_module.invalid_request_handler(make_request(), InvalidRequestError("query is too long"))
    )
    assert response.status_code == 400
    assert json.loads(response.body) == {"detail": "query is too long", "error_code": "invalid_request"}


def test_upstream_error_handler():
    response = asyncio.run(
        main_module.upstream_error_handler(make_request(), UpstreamError("bad gateway", status_code=500))
    )
    assert response.status_code == 502
    assert json.loads(response.body) == {
        "detail": "bad gateway",
        "error_code": "upstream_error",
        "upstream_status": 500,
    }


def test_search_videos_uses_section_path():
    root = {
        "contents": {
            "sectionListRenderer": {
                "contents": [{"itemSectionRenderer": {"contents": [make_renderer("s1"), make_renderer("")]}}]
            }
        },
        # Renderers outside the section path are ignored for search.
        "onResponseReceivedActions": [make_renderer("stray")],
    }
    page = kids_feed.search_videos(FakeClient(search_root=root), "cars")
    assert [item.url for item in page.items] == ["/watch?v=s1"]
    assert page.items[0].duration_seconds == 60


def test_home_videos_scans_whole_tree():
    root = {"contents": {"tabs": [{"content": {"grid": [make_renderer("h1"), {"x": make_renderer("h2")}]}}]}}
    client = FakeClient(browse_roots={"FEkids_home": root})
    assert [item.url for item in kids_feed.home_videos(client)] == ["/watch?v=h1", "/watch?v=h2"]
    assert client.browsed == ["FEkids_home"]


def test_curated_videos_browses_each_channel():
    client = FakeClient(
        browse_roots={
            "UC_A": [make_renderer(f"a{index}") for index in range(6)],
            "UC_B": UpstreamError("down", status_code=500),
            "UC_C": {"items": [make_renderer("c0")]},
        }
    )
    items = kids_feed.curated_videos(client, ["UC_A", "UC_B", "UC_C"], AggregationPolicy())
    assert [item.url for item in items] == ["/watch?v=a0", "/watch?v=a1", "/watch?v=a2", "/watch?v=a3", "/watch?v=c0"]
    assert client.browsed == ["UC_A", "UC_B", "UC_C"]


def test_load_curated_channels_from_file(tmp_path):
    path = tmp_path / "kids_channels.json"
    path.write_text(
        json.dumps({"channels": ["UC_ONE", {"channel_id": "UC_TWO", "title": "Two"}, " ", {"title": "x"}, "UC_ONE"]}),
        encoding="utf-8",
    )
    assert load_curated_channels(path) == ["UC_ONE", "UC_TWO"]


def test_load_curated_channels_falls_back(tmp_path):
    assert load_curated_channels(None) == DEFAULT_KIDS_CHANNELS
    assert load_curated_channels(tmp_path / "missing.json") == DEFAULT_KIDS_CHANNELS

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_curated_channels(broken) == DEFAULT_KIDS_CHANNELS

    empty = tmp_path / "empty.json"
    empty.write_text(json.dumps({"channels": []}), encoding="utf-8")
    assert load_curated_channels(empty) == DEFAULT_KIDS_CHANNELS


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("KIDS_BROWSE_CLIENT_VERSION", "2.20990101.00.00")
    monkeypatch.setenv("KIDS_REQUEST_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.delenv("KIDS_SEARCH_URL", raising=False)

    settings = load_settings()

    assert settings.browse_client_version == "2.20990101.00.00"
    assert settings.request_timeout_seconds == 15.0
    assert settings.search_url == DEFAULT_SEARCH_URL
