import logging
from datetime import datetime

from config import ActivityConfig
from errors import TimestampParseError
from github_api import GitHubAPI
from models import AUTHORED, MERGED, NO_CONTRIBUTION, NOBODY, PullRequest, RepoResult, User

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DISPLAY_FORMAT = "%Y-%m-%d"


def who_merged(github: GitHubAPI, repo: str, issue_number: int) -> User:
    """Find who merged a pull request.

    Args:
        github: GitHubAPI instance
        repo: Repository in format 'owner/name'
        issue_number: Pull request number

    Returns:
        Actor of the first 'merged' event, or the 'nobody' user if it was never merged
    """
    for event in github.load_events(repo, issue_number):
        if event.event == "merged":
            return event.actor
    return User(NOBODY)


def commit_author(github: GitHubAPI, repo: str, sha: str) -> User:
    """Return the GitHub user a commit is attributed to."""
    return github.load_commit(repo, sha).author


def classify_contribution(github: GitHubAPI, repo: str, pull: PullRequest, target_user: str) -> str:
    """Work out what the target user did on a pull request.

    Only closed pull requests written by someone else need their event
    history, so open ones never cost an API call.

    Args:
        github: GitHubAPI instance
        repo: Repository in format 'owner/name'
        pull: Pull request to classify
        target_user: GitHub login we are reporting on

    Returns:
        "authored", "merged" or "none"
    """
    if pull.author.login == target_user:
        return AUTHORED
    if pull.state == "closed" and who_merged(github, repo, pull.number).login == target_user:
        return MERGED
    return NO_CONTRIBUTION


def parse_timestamp(value: str) -> datetime:
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except (TypeError, ValueError) as e:
        raise TimestampParseError(f"unparsable timestamp {value!r}: {e}") from e


def collect_repo_activity(github: GitHubAPI, repo: str, config: ActivityConfig) -> RepoResult:
    """Collect the target user's pull requests created in the target year.

    Pages are walked in order and each page is sorted by descending number.
    The first pull request created before the target year ends the whole
    traversal: pull request numbers are assumed to grow with creation time.
    That holds for GitHub in practice but is not guaranteed.

    Args:
        github: GitHubAPI instance
        repo: Repository in format 'owner/name'
        config: Run configuration holding the target user and year

    Returns:
        RepoResult with qualifying pull requests in traversal order
    """
    result = RepoResult(repo)
    page = 1
    while True:
        pulls = github.load_pull_page(repo, page)
        if not pulls:  # No more pages
            break

        for pull in sorted(pulls, key=lambda p: p.number, reverse=True):
            created_at = parse_timestamp(pull.created_at)
            if created_at.year > config.year:
                continue
            if created_at.year < config.year:
                logging.info(f"Reached pull requests older than {config.year} in {repo} at #{pull.number}")
                return result

            pull.contribution = classify_contribution(github, repo, pull, config.user)
            if pull.contribution != NO_CONTRIBUTION:
                pull.display_date = created_at.strftime(DISPLAY_FORMAT)
                result.add(pull)

        page += 1

    return result
