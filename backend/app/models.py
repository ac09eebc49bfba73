from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentItem(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    type: str
    url: str = Field(min_length=1)


class VideoItem(ContentItem):
    type: Literal["stream"] = "stream"
    title: str = ""
    thumbnail_url: str = ""
    uploader_name: str = ""
    uploader_url: str | None = None
    uploader_avatar_url: str = ""
    uploaded_date_text: str | None = ""
    short_description: str = ""
    duration_seconds: int = -1
    view_count: int = -1
    # Not exposed by the kids surface.
    uploaded_timestamp: int = -1
    uploader_verified: bool = False
    is_short: bool = False


class SearchResultPage(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    items: list[VideoItem] = Field(default_factory=list)
    next_page_token: str | None = None
    suggestion: str | None = None
    corrected: bool = False
