import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from itertools import islice
from typing import TypeVar

LOGGER = logging.getLogger("kids_feed.aggregator")

T = TypeVar("T")


@dataclass(frozen=True)
class AggregationPolicy:
    primary_sources: int = 5
    primary_cap: int = 4
    fallback_cap: int = 3
    target_total: int = 20
    fallback_floor: int = 15


DEFAULT_POLICY = AggregationPolicy()


def aggregate(
    sources: Sequence[str],
    fetch: Callable[[str], Iterable[T]],
    policy: AggregationPolicy = DEFAULT_POLICY,
    logger: logging.Logger = LOGGER,
) -> list[T]:
    """
    Merge items from curated sources, best effort.

    Primary pass: the first `primary_sources` sources, `primary_cap` items each.
    Fallback pass: only when still under `fallback_floor`, the remaining
    sources at `fallback_cap` items each. Both passes stop as soon as
    `target_total` items are collected. A failing source is logged and skipped.
    Output keeps source order, then each source's own order.
    """
    items: list[T] = []
    primary_count = min(policy.primary_sources, len(sources))

    for source in sources[:primary_count]:
        if len(items) >= policy.target_total:
            break
        items.extend(_take_from_source(source, fetch, policy.primary_cap, policy.target_total - len(items), logger))

    remaining = sources[primary_count:]
    if len(items) >= policy.fallback_floor or not remaining:
        return items

    logger.info(
        "curated primary pass short collected=%s floor=%s fallback_sources=%s",
        len(items),
        policy.fallback_floor,
        len(remaining),
    )
    for source in remaining:
        if len(items) >= policy.target_total:
            break
        items.extend(_take_from_source(source, fetch, policy.fallback_cap, policy.target_total - len(items), logger))

    return items


def _take_from_source(
    source: str,
    fetch: Callable[[str], Iterable[T]],
    cap: int,
    room: int,
    logger: logging.Logger,
) -> list[T]:
    try:
        return list(islice(fetch(source), max(0, min(cap, room))))
    except Exception as exc:
        logger.warning("curated source skipped source=%s error=%s", source, exc)
        return []
