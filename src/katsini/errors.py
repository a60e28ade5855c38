from typing import Optional


class KatsiniError(Exception):
    """Base class for every lookup failure."""


class MissingIdentifier(KatsiniError):
    pass


class AppNotFound(KatsiniError):
    def __init__(self, message: str = "app not found"):
        super().__init__(message)


class PageLoadTimeout(KatsiniError):
    def __init__(self, message: str = "failed to load page: timeout while extracting data"):
        super().__init__(message)


class ExtractionFailed(KatsiniError):
    def __init__(self, cause: Exception):
        super().__init__(f"failed to extract app data: {cause}")
        self.cause = cause


class DateParseError(KatsiniError):
    def __init__(self, raw: str, source_format: str):
        super().__init__(f"cannot parse date {raw!r} with format {source_format!r}")
        self.raw = raw
        self.source_format = source_format


class SessionCreationFailed(KatsiniError):
    def __init__(self, cause: Exception):
        super().__init__(f"failed to start browser session: {cause}")
        self.cause = cause


class AuthFailed(KatsiniError):
    pass


class UpstreamError(KatsiniError):
    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message if code is None else f"{message} (code {code})")
        self.code = code
