import argparse
import logging
import re
import sys
from typing import List, Optional, TextIO

from chart_activity import plot_monthly_activity
from config import ActivityConfig
from contributions import collect_repo_activity, commit_author
from errors import ActivityError
from github_api import GitHubAPI
from models import RepoResult
from report import render_html, render_text

REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def repository(value: str) -> str:
    """argparse type for 'owner/name' repository identifiers."""
    if not REPO_PATTERN.match(value) or any(part in ('.', '..') for part in value.split('/')):
        raise argparse.ArgumentTypeError(f"invalid repository {value!r}, expected 'owner/name'")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report a user's pull request activity for a year")
    parser.add_argument("repos", nargs="+", type=repository, help="Repositories in format 'owner/name'")
    parser.add_argument("--user", help="GitHub login to report on (or PR_ACTIVITY_USER)")
    parser.add_argument("--year", type=int, help="Year of pull request creation (or PR_ACTIVITY_YEAR, default: last year)")
    parser.add_argument("--cache-dir", help="Directory for cached API responses (default: cache)")
    parser.add_argument("--delay", type=float, help="Seconds to wait after each API call (default: 5)")
    parser.add_argument("--format", choices=["text", "html"], default="text", help="Report format")
    parser.add_argument("--output", help="Write the report to this file instead of stdout")
    parser.add_argument("--chart", action="store_true", help="Also save a monthly activity chart to output/")
    parser.add_argument("--commit", metavar="SHA", help="Print the author of a commit in the first repository and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def run(repos: List[str], config: ActivityConfig, output_format: str = "text",
        out: TextIO = sys.stdout, github: Optional[GitHubAPI] = None) -> List[RepoResult]:
    """Process repositories one after another and write the report.

    Text output is flushed after every repository, so results of completed
    repositories survive a failure later in the batch.

    Args:
        repos: Repositories in format 'owner/name', processed in order
        config: Run configuration
        output_format: 'text' or 'html'
        out: Stream the report is written to
        github: GitHubAPI instance, built from config by default

    Returns:
        Results of all repositories

    Raises:
        ActivityError: From the first repository that fails; the batch stops there
    """
    github = github or GitHubAPI(config)
    results = []
    for repo in repos:
        try:
            result = collect_repo_activity(github, repo, config)
        except ActivityError as e:
            logging.error(f"Failed processing {repo}: {e}")
            raise

        logging.info(f"{repo}: {result.authored} authored, {result.merged} merged")
        results.append(result)
        if output_format == "text":
            out.write(render_text(result))
            out.flush()

    if output_format == "html":
        out.write(render_html(results, config))
        out.flush()
    return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = ActivityConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    if args.commit:
        try:
            author = commit_author(GitHubAPI(config), args.repos[0], args.commit)
        except ActivityError as e:
            logging.error(f"Failed loading commit {args.commit} of {args.repos[0]}: {e}")
            return 1
        print(author.login)
        return 0

    out = open(args.output, 'w') if args.output else sys.stdout
    try:
        results = run(args.repos, config, args.format, out)
    except ActivityError:
        return 1
    finally:
        if args.output:
            out.close()

    if args.chart:
        plot_monthly_activity(results, config.year, config.user)
    return 0


if __name__ == "__main__":
    sys.exit(main())
