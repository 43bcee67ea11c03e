"""Exception hierarchy for wiki mirroring errors."""

from typing import List


class WikiMirrorError(Exception):
    """Base exception for all wiki-mirror errors."""
    pass


class ConfigurationError(WikiMirrorError):
    """Raised when required environment configuration is missing."""

    def __init__(self, missing: List[str]):
        super().__init__(
            "Missing required environment variables: " + ", ".join(missing)
        )
        self.missing = list(missing)


class MalformedResponseError(WikiMirrorError):
    """Raised when a page response does not have the expected shape."""

    def __init__(self, title: str, reason: str):
        super().__init__(f"Malformed response for page '{title}': {reason}")
        self.title = title
        self.reason = reason
