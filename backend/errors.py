"""Error taxonomy for the audit pipeline.

Every failure surfaced to callers is an AuditError subclass carrying a
human-readable message and the HTTP status the API layer maps it to.
"""


class AuditError(Exception):
    """Base class for all audit pipeline failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchError(AuditError):
    """Network failure or non-success status while fetching the page."""

    status_code = 502

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status = status
        if status is not None:
            message = f"Failed to fetch {url}: HTTP {status} {reason}".rstrip()
        else:
            message = f"Failed to fetch {url}: {reason}"
        super().__init__(message)


class ParseError(AuditError):
    """Markup could not be parsed at all. scraper.extract degrades it to empty signals."""


class AllVariantsExhausted(AuditError):
    """Every model variant failed or returned an empty reply."""

    status_code = 503

    def __init__(self, last_error: BaseException | None, variant: str | None = None) -> None:
        self.last_error = last_error
        self.variant = variant
        if last_error is None:
            message = "All model variants failed to respond."
        else:
            message = f"All model variants failed to respond (last: {variant}): {last_error}"
        super().__init__(message)


class MalformedReply(AuditError):
    """Model reply holds no usable JSON object or fails report validation."""

    status_code = 502

    def __init__(self, reason: str, raw_text: str = "") -> None:
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(f"Malformed AI reply: {reason}")
