import os
from dataclasses import dataclass
from datetime import datetime

DEFAULT_CACHE_DIR = "cache"
DEFAULT_BASE_URL = "https://api.github.com"
# Unauthenticated GitHub API calls are limited to 60 per hour
DEFAULT_RATE_LIMIT_DELAY = 5.0


@dataclass
class ActivityConfig:
    """Settings for one report run.

    Args:
        user: GitHub login whose activity is reported
        year: Calendar year of pull request creation to keep
        cache_dir: Root directory of the response cache
        rate_limit_delay: Seconds to wait after every network call
        base_url: GitHub API root
        timeout: Request timeout in seconds
    """

    user: str
    year: int
    cache_dir: str = DEFAULT_CACHE_DIR
    rate_limit_delay: float = DEFAULT_RATE_LIMIT_DELAY
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0

    @classmethod
    def from_args(cls, args) -> "ActivityConfig":
        """Build the configuration from parsed CLI arguments.

        Values missing on the command line fall back to the
        PR_ACTIVITY_USER and PR_ACTIVITY_YEAR environment variables.

        Raises:
            ValueError: If no user is given or the year is not a number
        """
        user = args.user or os.environ.get("PR_ACTIVITY_USER")
        if not user:
            raise ValueError("a GitHub user is required (--user or PR_ACTIVITY_USER)")

        year = args.year or os.environ.get("PR_ACTIVITY_YEAR")
        if year is None:
            year = datetime.now().year - 1

        delay = DEFAULT_RATE_LIMIT_DELAY if args.delay is None else args.delay
        return cls(
            user=user,
            year=int(year),
            cache_dir=args.cache_dir or DEFAULT_CACHE_DIR,
            rate_limit_delay=delay,
        )
