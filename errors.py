"""Exceptions raised while fetching and classifying pull request activity.

Inner modules raise these; the batch driver in pr_activity.py catches
ActivityError, reports which repository failed and aborts the run.
"""

from typing import Optional


class ActivityError(Exception):
    """Base exception for the activity report."""


class FetchError(ActivityError):
    """A request to the GitHub API could not be completed."""


class HTTPStatusError(FetchError):
    """The GitHub API answered with a non-success status code."""

    def __init__(self, status_code: int, url: str, message: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        text = f"HTTP {status_code} for {url}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class CacheWriteError(ActivityError):
    """A cache directory or file could not be written."""

    def __init__(self, path: str, reason: Exception):
        self.path = path
        super().__init__(f"unable to write to {path}: {reason}")


class PayloadDecodeError(ActivityError):
    """A cached or fetched payload is not the expected JSON shape."""


class TimestampParseError(ActivityError):
    """A timestamp from the API is not in the expected format."""
