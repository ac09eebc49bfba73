import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from backend.app.models import VideoItem

LOGGER = logging.getLogger("kids_feed.parsing")

VIDEO_RENDERER_KEY = "compactVideoRenderer"
UNKNOWN = -1

VIEW_MAGNITUDES = (
    ("k", 1_000),
    ("m", 1_000_000),
    ("b", 1_000_000_000),
)
NON_NUMERIC_RE = re.compile(r"[^0-9.]")
DIGITS_RE = re.compile(r"[0-9]+")


# ---------------------------
# Tree access
# ---------------------------

def node_path(node: Any, *steps: str | int) -> Any:
    """
    Walk dict keys / list indexes, returning None as soon as a step is missing.
    """
    current = node
    for step in steps:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


# ---------------------------
# Field extraction
# ---------------------------

def extract_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    runs = node.get("runs")
    if isinstance(runs, list) and runs:
        return _as_text(node_path(runs, 0, "text"))
    if "simpleText" in node:
        return _as_text(node.get("simpleText"))
    return ""


def extract_thumbnail(node: Any) -> str:
    # Thumbnails come in ascending resolution; the last one is the sharpest.
    thumbnails = node_path(node, "thumbnails")
    if isinstance(thumbnails, list) and thumbnails:
        return _as_text(node_path(thumbnails, -1, "url"))
    return ""


def extract_avatar(node: Any) -> str:
    thumbnails = node_path(node, "thumbnails")
    if isinstance(thumbnails, list) and thumbnails:
        return _as_text(node_path(thumbnails, 0, "url"))
    return ""


def extract_channel_id(node: Any) -> str | None:
    runs = node_path(node, "runs")
    if not isinstance(runs, list) or not runs:
        return None
    browse_id = _as_text(node_path(runs, 0, "navigationEndpoint", "browseEndpoint", "browseId"))
    return browse_id or None


# ---------------------------
# Numeric heuristics
# ---------------------------

def parse_duration(text: str | None) -> int:
    if not text:
        return UNKNOWN
    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(DIGITS_RE.fullmatch(part) for part in parts):
        return UNKNOWN
    seconds = 0
    try:
        for part in parts:
            seconds = seconds * 60 + int(part)
    except ValueError:
        # Digit strings past the interpreter's int conversion limit.
        return UNKNOWN
    return seconds


def parse_view_count(text: str | None) -> int:
    """
    "1.2M views" -> 1200000, "5,234 views" -> 5234.

    Magnitude letters are checked k, then m, then b; the first one present wins.
    Without a magnitude letter a "." is a thousands separator.
    """
    if not text:
        return UNKNOWN
    numbers = NON_NUMERIC_RE.sub("", text)
    lowered = text.lower()
    for letter, multiplier in VIEW_MAGNITUDES:
        if letter in lowered:
            # Precision covers every input digit plus the multiplier, so no rounding.
            with localcontext() as ctx:
                ctx.prec = len(numbers) + len(str(multiplier))
                try:
                    return int(Decimal(numbers) * multiplier)
                except (InvalidOperation, ValueError):
                    return UNKNOWN
    digits = numbers.replace(".", "")
    if not digits:
        return UNKNOWN
    try:
        return int(digits)
    except ValueError:
        return UNKNOWN


# ---------------------------
# Renderer decoding
# ---------------------------

@dataclass(frozen=True)
class DecodeOutcome:
    item: VideoItem | None = None
    error: Exception | None = None


def decode_renderer_outcome(fragment: Any) -> DecodeOutcome:
    try:
        video_id = _as_text(node_path(fragment, "videoId"))
        if not video_id:
            return DecodeOutcome()

        byline = node_path(fragment, "longBylineText")
        channel_id = extract_channel_id(byline)
        item = VideoItem(
            url=f"/watch?v={video_id}",
            title=extract_text(node_path(fragment, "title")),
            thumbnail_url=extract_thumbnail(node_path(fragment, "thumbnail")),
            uploader_name=extract_text(byline),
            uploader_url=f"/channel/{channel_id}" if channel_id else None,
            uploader_avatar_url=extract_avatar(node_path(fragment, "channelThumbnail")),
            uploaded_date_text=extract_text(node_path(fragment, "publishedTimeText")),
            short_description="",
            duration_seconds=parse_duration(extract_text(node_path(fragment, "lengthText"))),
            view_count=parse_view_count(extract_text(node_path(fragment, "viewCountText"))),
        )
    except Exception as exc:
        return DecodeOutcome(error=exc)
    return DecodeOutcome(item=item)


def decode_renderer(fragment: Any) -> VideoItem | None:
    return decode_renderer_outcome(fragment).item


def decode_renderers(fragments: Iterable[Any], logger: logging.Logger = LOGGER) -> list[VideoItem]:
    items: list[VideoItem] = []
    for fragment in fragments:
        outcome = decode_renderer_outcome(fragment)
        if outcome.error is not None:
            logger.warning(
                "skipping undecodable renderer video_id=%s error=%s",
                node_path(fragment, "videoId"),
                outcome.error,
            )
            continue
        if outcome.item is not None:
            items.append(outcome.item)
    return items


# ---------------------------
# Tree scanning
# ---------------------------

def iter_renderer_fragments(node: Any, marker: str = VIDEO_RENDERER_KEY) -> Iterator[dict[str, Any]]:
    """
    Depth-first walk of the whole document. Matches are yielded and then
    descended into, so renderers nested inside renderers are found too.
    """
    if isinstance(node, dict):
        payload = node.get(marker)
        if isinstance(payload, dict):
            yield payload
        for value in node.values():
            yield from iter_renderer_fragments(value, marker)
    elif isinstance(node, list):
        for value in node:
            yield from iter_renderer_fragments(value, marker)


def iter_search_fragments(root: Any, marker: str = VIDEO_RENDERER_KEY) -> Iterator[dict[str, Any]]:
    sections = node_path(root, "contents", "sectionListRenderer", "contents")
    if not isinstance(sections, list):
        return
    for section in sections:
        section_items = node_path(section, "itemSectionRenderer", "contents")
        if not isinstance(section_items, list):
            continue
        for entry in section_items:
            payload = node_path(entry, marker)
            if isinstance(payload, dict):
                yield payload
