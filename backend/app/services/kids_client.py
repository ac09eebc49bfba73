import logging
from typing import Any

import requests

from backend.app.config import Settings
from backend.app.errors import InvalidRequestError, UpstreamError

LOGGER = logging.getLogger("kids_feed.client")

CLIENT_NAME = "WEB_KIDS"
CLIENT_NAME_ID = "76"
KIDS_ORIGIN = "https://www.youtubekids.com"
HOME_BROWSE_ID = "FEkids_home"
MAX_QUERY_LENGTH = 100
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)


class KidsApiClient:
    """
    Thin POST wrapper around the YouTube Kids youtubei endpoints.

    Returns the decoded JSON document untouched; interpreting it is the
    parser's job. One request per call, no retries.
    """

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or Settings()
        self.session = session or requests.Session()

    def execute_search(self, query: str) -> Any:
        if not query:
            raise InvalidRequestError("query is a required parameter")
        if len(query) > MAX_QUERY_LENGTH:
            raise InvalidRequestError("query is too long")

        client = self._client_context(self.settings.search_client_version)
        client["hl"] = "en"
        client["kidsAppInfo"] = {
            "contentSettings": {
                "corpusPreference": "KIDS_CORPUS_PREFERENCE_TWEEN",
                "kidsNoSearchMode": "YT_KIDS_NO_SEARCH_MODE_OFF",
            }
        }
        payload = {"context": {"client": client}, "query": query}
        return self._post(self.settings.search_url, payload, self.settings.search_client_version)

    def execute_browse(self, browse_id: str) -> Any:
        if not browse_id:
            raise InvalidRequestError("browseId is a required parameter")

        payload = {
            "context": {"client": self._client_context(self.settings.browse_client_version)},
            "browseId": browse_id,
        }
        return self._post(self.settings.browse_url, payload, self.settings.browse_client_version)

    @staticmethod
    def _client_context(client_version: str) -> dict[str, Any]:
        return {"clientName": CLIENT_NAME, "clientVersion": client_version}

    def _post(self, url: str, payload: dict[str, Any], client_version: str) -> Any:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "x-youtube-client-name": CLIENT_NAME_ID,
            "x-youtube-client-version": client_version,
            "origin": KIDS_ORIGIN,
        }
        LOGGER.debug("youtube kids request url=%s", url)
        try:
            response = self.session.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.settings.request_timeout_seconds,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"YouTube Kids is unreachable: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"YouTube Kids API returned error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                "YouTube Kids API returned a body that is not JSON",
                status_code=response.status_code,
            ) from exc
