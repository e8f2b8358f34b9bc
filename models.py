import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from errors import PayloadDecodeError

AUTHORED = "authored"
MERGED = "merged"
NO_CONTRIBUTION = "none"

NOBODY = "nobody"


@dataclass
class User:
    login: str


@dataclass
class Event:
    actor: User
    event: str


@dataclass
class Commit:
    sha: str
    author: User


@dataclass
class PullRequest:
    number: int
    html_url: str
    created_at: str
    merged_at: Optional[str]
    state: str
    title: str
    author: User

    # Filled in by the classifier and the pagination driver
    contribution: str = NO_CONTRIBUTION
    display_date: Optional[str] = None


@dataclass
class RepoResult:
    """Qualifying pull requests of one repository, in traversal order."""

    repo: str
    pulls: List[PullRequest] = field(default_factory=list)
    authored: int = 0
    merged: int = 0

    def add(self, pull: PullRequest) -> None:
        self.pulls.append(pull)
        if pull.contribution == AUTHORED:
            self.authored += 1
        elif pull.contribution == MERGED:
            self.merged += 1


def _parse_json(data: bytes, what: str) -> Any:
    try:
        return json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(f"JSON decoding of {what} failed: {e}") from e


def _user(item: Optional[Dict[str, Any]]) -> User:
    # Deleted accounts come back as null
    if not item:
        return User(NOBODY)
    return User(item["login"])


def _array_of_objects(data: bytes, what: str) -> List[Dict[str, Any]]:
    items = _parse_json(data, what)
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise PayloadDecodeError(f"expected a JSON array of objects for {what}")
    return items


def decode_pulls(data: bytes) -> List[PullRequest]:
    """Decode a page of the pull request listing.

    Args:
        data: Raw response body

    Returns:
        Pull requests in the order the API returned them

    Raises:
        PayloadDecodeError: If the body is not a list of pull request objects
    """
    pulls = []
    for item in _array_of_objects(data, "pull requests"):
        try:
            pulls.append(PullRequest(
                number=int(item["number"]),
                html_url=item["html_url"],
                created_at=item["created_at"],
                merged_at=item.get("merged_at"),
                state=item["state"],
                title=item["title"],
                author=_user(item["user"]),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadDecodeError(f"malformed pull request: missing or invalid {e}") from e
    return pulls


def decode_events(data: bytes) -> List[Event]:
    """Decode the event list of an issue or pull request."""
    events = []
    for item in _array_of_objects(data, "issue events"):
        try:
            events.append(Event(actor=_user(item.get("actor")), event=item["event"]))
        except (KeyError, TypeError) as e:
            raise PayloadDecodeError(f"malformed issue event: missing or invalid {e}") from e
    return events


def decode_commit(data: bytes) -> Commit:
    """Decode a single commit."""
    item = _parse_json(data, "commit")
    if not isinstance(item, dict):
        raise PayloadDecodeError("expected a JSON object for commit")
    try:
        return Commit(sha=item["sha"], author=_user(item.get("author")))
    except (KeyError, TypeError) as e:
        raise PayloadDecodeError(f"malformed commit: missing or invalid {e}") from e
