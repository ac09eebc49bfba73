class KidsFeedError(Exception):
    pass


class InvalidRequestError(KidsFeedError):
    """Caller input the service refuses before touching upstream."""


class UpstreamError(KidsFeedError):
    """YouTube Kids answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
