import json
import logging
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger("kids_feed.sources")

# Ordered: the first entries feed the primary aggregation pass.
DEFAULT_KIDS_CHANNELS = [
    "UCbCmjCuTUZos6Inko4u57UQ",  # Cocomelon - Nursery Rhymes
    "UCoookXUzPciGrEZEXmh4Jjg",  # Sesame Street
    "UCLsooMJoIpl_7ux2jvdPB-Q",  # Super Simple Songs
    "UC5PYHgAzJ1wLEidB58SK6Xw",  # Blippi
    "UCcdwLMPsaU2ezNSJU1nFoBQ",  # Pinkfong Baby Shark
    "UCXVCgDuD_QCkI7gTKU7-tpg",  # National Geographic Kids
    "UCk8GzjMOrta8yxDcKfylJYw",  # Kids Diana Show
]


def _normalize_channel_entry(entry: Any) -> str | None:
    if isinstance(entry, str):
        channel_id = entry.strip()
    elif isinstance(entry, dict):
        channel_id = str(entry.get("channel_id") or "").strip()
    else:
        return None
    return channel_id or None


def load_curated_channels(path: Path | None) -> list[str]:
    """
    Read the curated channel list from a JSON file, or fall back to the
    built-in list when the file is missing, unreadable, or has no usable ids.

    File shape: {"channels": ["UC...", {"channel_id": "UC...", "title": "..."}]}
    """
    if path is None or not path.exists():
        return list(DEFAULT_KIDS_CHANNELS)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.warning("curated channel file unreadable path=%s error=%s", path, exc)
        return list(DEFAULT_KIDS_CHANNELS)

    entries = payload.get("channels") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        LOGGER.warning("curated channel file has no channels list path=%s", path)
        return list(DEFAULT_KIDS_CHANNELS)

    channels: list[str] = []
    seen: set[str] = set()
    for raw in entries:
        channel_id = _normalize_channel_entry(raw)
        if not channel_id or channel_id in seen:
            continue
        seen.add(channel_id)
        channels.append(channel_id)

    return channels or list(DEFAULT_KIDS_CHANNELS)
