from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import backend.main as main_module
from backend.app.errors import InvalidRequestError, UpstreamError
from backend.app.models import SearchResultPage, VideoItem


def make_item(video_id: str) -> VideoItem:
    return VideoItem(
        url=f"/watch?v={video_id}",
        title=f"Video {video_id}",
        thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        uploader_name="Smoke Channel",
        uploader_url="/channel/UC_SMOKE",
        duration_seconds=125,
        view_count=1200,
    )


def assert_true(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def test_health() -> None:
    payload = main_module.health()
    assert_true(payload.get("ok") is True, "/health should return ok=true")


def test_search_shape() -> None:
    page = SearchResultPage(items=[make_item("s1")])
    with patch.object(main_module, "search_videos", return_value=page) as fake_search:
        payload = main_module.kids_search(q="dinosaurs", filter="videos")

    assert_true(fake_search.call_count == 1, "/kids/search should query upstream once")
    dumped = payload.model_dump(by_alias=True)
    assert_true(dumped["nextPageToken"] is None, "/kids/search should not paginate")
    assert_true(dumped["corrected"] is False, "/kids/search corrected should be false")
    required_keys = {
        "url",
        "title",
        "thumbnailUrl",
        "uploaderName",
        "uploaderUrl",
        "uploaderAvatarUrl",
        "uploadedDateText",
        "shortDescription",
        "durationSeconds",
        "viewCount",
        "uploadedTimestamp",
        "uploaderVerified",
        "isShort",
    }
    assert_true(required_keys.issubset(set(dumped["items"][0].keys())), "/kids/search item shape is missing keys")


def test_search_rejects_empty_query() -> None:
    try:
        main_module.kids_search(q="")
    except InvalidRequestError:
        return
    raise AssertionError("/kids/search should reject an empty query")


def test_videos_home_feed() -> None:
    with (
        patch.object(main_module, "home_videos", return_value=[make_item("h1")]),
        patch.object(main_module, "curated_videos") as fake_curated,
    ):
        payload = main_module.kids_videos(region="US")

    assert_true(len(payload) == 1, "/kids/videos should return the home feed")
    assert_true(fake_curated.call_count == 0, "/kids/videos should not aggregate when home has items")


def test_videos_curated_fallback() -> None:
    with (
        patch.object(main_module, "home_videos", side_effect=UpstreamError("down", status_code=503)),
        patch.object(main_module, "curated_videos", return_value=[make_item("c1"), make_item("c2")]),
    ):
        payload = main_module.trending(region="US")

    assert_true(len(payload) == 2, "/trending should fall back to curated channels")


def test_channels_requires_region() -> None:
    try:
        main_module.kids_channels(region=None)
    except InvalidRequestError:
        return
    raise AssertionError("/kids/channels should require region")


def run() -> int:
    checks = [
        ("health", test_health),
        ("search shape", test_search_shape),
        ("search rejects empty query", test_search_rejects_empty_query),
        ("videos home feed", test_videos_home_feed),
        ("videos curated fallback", test_videos_curated_fallback),
        ("channels requires region", test_channels_requires_region),
    ]
    failures = []

    for check_name, check_fn in checks:
        try:
            check_fn()
            print(f"[PASS] {check_name}")
        except Exception as exc:  # pragma: no cover - smoke script output path
            failures.append((check_name, str(exc)))
            print(f"[FAIL] {check_name}: {exc}")

    if failures:
        print(f"\nSmoke checks failed: {len(failures)}")
        for check_name, message in failures:
            print(f"- {check_name}: {message}")
        return 1

    print("\nAll smoke checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
