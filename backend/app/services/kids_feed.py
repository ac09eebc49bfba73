from collections.abc import Sequence
from functools import partial

from backend.app.models import SearchResultPage, VideoItem
from backend.app.services.aggregator import DEFAULT_POLICY, AggregationPolicy, aggregate
from backend.app.services.kids_client import HOME_BROWSE_ID, KidsApiClient
from backend.app.services.renderer_parsing import (
    decode_renderers,
    iter_renderer_fragments,
    iter_search_fragments,
)


def search_videos(client: KidsApiClient, query: str) -> SearchResultPage:
    # Only renderers under the section list are results.
    root = client.execute_search(query)
    items = decode_renderers(iter_search_fragments(root))
    return SearchResultPage(items=items)


def home_videos(client: KidsApiClient) -> list[VideoItem]:
    root = client.execute_browse(HOME_BROWSE_ID)
    return decode_renderers(iter_renderer_fragments(root))


def channel_videos(client: KidsApiClient, channel_id: str) -> list[VideoItem]:
    root = client.execute_browse(channel_id)
    return decode_renderers(iter_renderer_fragments(root))


def curated_videos(
    client: KidsApiClient,
    sources: Sequence[str],
    policy: AggregationPolicy = DEFAULT_POLICY,
) -> list[VideoItem]:
    return aggregate(sources, partial(channel_videos, client), policy)
