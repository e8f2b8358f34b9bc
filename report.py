import html
from typing import List

import pandas as pd

from config import ActivityConfig
from models import RepoResult

COLUMNS = ["repo", "number", "date", "contribution", "title", "url"]


def results_to_frame(results: List[RepoResult]) -> pd.DataFrame:
    """Flatten repository results into one row per pull request.

    Example output:
    | repo      | number | date       | contribution | title   | url  |
    |-----------|--------|------------|--------------|---------|------|
    | octo/demo | 5      | 2021-03-01 | authored     | Fix bug | ...  |
    """
    rows = [
        {
            "repo": result.repo,
            "number": pull.number,
            "date": pull.display_date,
            "contribution": pull.contribution,
            "title": pull.title,
            "url": pull.html_url,
        }
        for result in results
        for pull in result.pulls
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def render_text(result: RepoResult) -> str:
    """Render one repository as plain text lines."""
    lines = [f"{result.repo}: {result.authored} authored, {result.merged} merged"]
    for pull in result.pulls:
        lines.append(f"#{pull.number} [{pull.contribution}] {pull.display_date} {pull.title} {pull.html_url}")
    return "\n".join(lines) + "\n"


def render_html(results: List[RepoResult], config: ActivityConfig) -> str:
    """Render all repositories as a standalone HTML page.

    Args:
        results: Completed repository results, in processing order
        config: Run configuration, used for the page title

    Returns:
        HTML document with one table per repository
    """
    title = html.escape(f"Pull request activity of {config.user} in {config.year}")
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        f"<head><meta charset=\"utf-8\"><title>{title}</title></head>",
        "<body>",
        f"<h1>{title}</h1>",
    ]

    df = results_to_frame(results)
    for result in results:
        parts.append(f"<h2>{html.escape(result.repo)}</h2>")
        parts.append(f"<p>{result.authored} authored, {result.merged} merged</p>")
        if not result.pulls:
            parts.append("<p>No activity</p>")
            continue

        table = df[df["repo"] == result.repo].drop(columns=["repo"])
        table = table.rename(columns={
            "number": "Number",
            "date": "Date",
            "contribution": "Contribution",
            "title": "Title",
            "url": "URL",
        })
        parts.append(table.to_html(index=False, render_links=True, border=0))

    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"
