import requests
import logging
import time
from typing import Callable, List, Optional, TypeVar

from config import ActivityConfig
from errors import FetchError, HTTPStatusError, PayloadDecodeError
from github_cache import CacheKey, GitHubCache, COMMITS, EVENTS, PULLS
from models import Commit, Event, PullRequest, decode_commit, decode_events, decode_pulls

T = TypeVar("T")


class GitHubAPI:
    """Read-only, unauthenticated GitHub API client backed by an on-disk cache."""

    def __init__(self, config: ActivityConfig, cache: Optional[GitHubCache] = None):
        """Initialize GitHub API client.

        Args:
            config: Run configuration (API root, delay, timeout, cache dir)
            cache: Cache store to use; one rooted at config.cache_dir by default
        """
        self.base_url = config.base_url.rstrip('/')
        self.rate_limit_delay = config.rate_limit_delay
        self.timeout = config.timeout
        self.cache = cache if cache is not None else GitHubCache(config.cache_dir)
        self.headers = {
            'Accept': 'application/vnd.github.v3+json',
        }

    def fetch(self, url: str) -> bytes:
        """Make a single GET request and return the raw response body.

        Every successful call is followed by a fixed pause to stay under the
        rate limit. Nothing is retried.

        Args:
            url: Absolute API URL

        Returns:
            Response body

        Raises:
            FetchError: On connection, DNS or timeout failures
            HTTPStatusError: On a status code outside 200-299
        """
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}") from e

        if not 200 <= response.status_code <= 299:
            message = None
            try:
                message = response.json().get('message')
            except (ValueError, AttributeError):
                pass
            logging.error(f"API request failed: {message or 'No error message'}")
            raise HTTPStatusError(response.status_code, url, message)

        body = response.content
        time.sleep(self.rate_limit_delay)
        return body

    def _load_with_cache(self, key: CacheKey, url: str, decoder: Callable[[bytes], T]) -> T:
        """Return the decoded resource for key, fetching and caching it on a miss.

        Args:
            key: Cache key of the resource
            url: API URL to fetch on a miss
            decoder: Turns raw bytes into the resource type

        Raises:
            PayloadDecodeError: If cached or fetched bytes do not decode
        """
        data = self.cache.read(key)
        if data is not None:
            try:
                return decoder(data)
            except PayloadDecodeError as e:
                raise PayloadDecodeError(f"corrupted cache entry {self.cache.get_cache_path(key)}: {e}") from e

        logging.info(f"cache miss for {key.repo} {key.kind}/{key.identifier}, reading from the wire")
        data = self.fetch(url)
        self.cache.write(key, data)
        try:
            return decoder(data)
        except PayloadDecodeError as e:
            raise PayloadDecodeError(f"unexpected response from {url}: {e}") from e

    def load_pull_page(self, repo: str, page: int) -> List[PullRequest]:
        """Load one page of all pull requests (open and closed).

        Args:
            repo: Repository in format 'owner/name'
            page: 1-based page number

        Returns:
            Pull requests on that page; empty once past the last page
        """
        url = f"{self.base_url}/repos/{repo}/pulls?state=all&page={page}"
        return self._load_with_cache(CacheKey(repo, PULLS, page), url, decode_pulls)

    def load_events(self, repo: str, issue_number: int) -> List[Event]:
        """Load the event history of an issue or pull request."""
        url = f"{self.base_url}/repos/{repo}/issues/{issue_number}/events"
        return self._load_with_cache(CacheKey(repo, EVENTS, issue_number), url, decode_events)

    def load_commit(self, repo: str, sha: str) -> Commit:
        url = f"{self.base_url}/repos/{repo}/commits/{sha}"
        return self._load_with_cache(CacheKey(repo, COMMITS, sha), url, decode_commit)
