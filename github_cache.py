import os
import logging
from typing import NamedTuple, Optional, Union

from errors import CacheWriteError

PULLS = "pulls"
EVENTS = "events"
COMMITS = "commits"


class CacheKey(NamedTuple):
    """Address of one cached API response.

    Args:
        repo: Repository in format 'owner/name'
        kind: One of 'pulls', 'events' or 'commits'
        identifier: Page number, issue number or commit SHA
    """
    repo: str
    kind: str
    identifier: Union[int, str]


class GitHubCache:
    """Stores raw GitHub API responses on disk.

    Entries are never expired: the historical data cached here does not
    change once a pull request is closed, and the cache only exists to stay
    under the unauthenticated rate limit.
    """

    def __init__(self, cache_dir: str = "cache"):
        """Initialize the cache handler.

        Args:
            cache_dir: Root directory of the cache tree
        """
        self.cache_dir = cache_dir

    def get_cache_path(self, key: CacheKey) -> str:
        """Generate the cache file path for a key.

        Args:
            key: Cache key

        Returns:
            Path of the form <cache_dir>/<owner>/<name>/<kind>/<id>.json
        """
        owner, name = key.repo.split('/', 1)
        return os.path.join(self.cache_dir, owner, name, key.kind, f"{key.identifier}.json")

    def read(self, key: CacheKey) -> Optional[bytes]:
        """Load the raw bytes stored for a key.

        Args:
            key: Cache key

        Returns:
            The bytes previously written, or None on a cache miss
        """
        path = self.get_cache_path(key)
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logging.warning(f"Unreadable cache file {path}, treating as a miss: {e}")
            return None

        logging.debug(f"Cache hit for {path}")
        return data

    def write(self, key: CacheKey, data: bytes) -> None:
        """Save raw bytes for a key, readable by the owner only.

        Args:
            key: Cache key
            data: Response body to store

        Raises:
            CacheWriteError: If the directory or the file cannot be written
        """
        path = self.get_cache_path(key)
        subdir = os.path.dirname(path)
        try:
            os.makedirs(subdir, mode=0o700, exist_ok=True)
        except OSError as e:
            raise CacheWriteError(subdir, e) from e

        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            # The mode passed to os.open only applies to newly created files
            os.chmod(path, 0o600)
        except OSError as e:
            raise CacheWriteError(path, e) from e
