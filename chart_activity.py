"""
Chart of a user's monthly pull request activity.

Counts authored and merged pull requests per month of the target year
across all processed repositories and saves a line chart under output/.
"""

import os
from typing import List, Tuple

import pandas as pd
import matplotlib.pyplot as plt

from models import AUTHORED, MERGED, RepoResult
from report import results_to_frame

# Constants
OUTPUT_DIR = "output"


def ensure_output_dir():
    """Ensure output directory exists."""
    if not os.path.exists(OUTPUT_DIR):
        os.makedirs(OUTPUT_DIR)


def save_chart(output_filename: str) -> str:
    """Save the current chart, close it and return where it was written."""
    ensure_output_dir()
    output_path = os.path.join(OUTPUT_DIR, output_filename)
    plt.savefig(output_path, bbox_inches='tight')
    plt.close()
    print(f"Chart has been saved as {output_path}")
    return output_path


def setup_chart(figsize: Tuple[int, int] = (12, 6)) -> Tuple[plt.Figure, plt.Axes]:
    fig, ax = plt.subplots(figsize=figsize)
    ax.grid(True)
    return fig, ax


def monthly_activity(results: List[RepoResult], year: int) -> pd.DataFrame:
    """Count authored and merged pull requests per month.

    Args:
        results: Completed repository results
        year: Target year; every month of it appears in the output

    Returns:
        DataFrame indexed by month start with 'authored' and 'merged' columns
    """
    months = pd.date_range(start=f"{year}-01-01", end=f"{year}-12-01", freq='MS')
    df = results_to_frame(results)
    if df.empty:
        return pd.DataFrame(0, index=months, columns=[AUTHORED, MERGED])

    df["month"] = pd.to_datetime(df["date"], format="%Y-%m-%d").dt.to_period("M").dt.to_timestamp()
    grouped = df.groupby(["month", "contribution"]).size().unstack(fill_value=0)
    grouped = grouped.reindex(index=months, columns=[AUTHORED, MERGED], fill_value=0)
    return grouped.astype(int)


def plot_monthly_activity(results: List[RepoResult], year: int, user: str,
                          output_filename: str = None) -> None:
    """Create a chart showing authored and merged pull requests per month.

    Args:
        results: Completed repository results
        year: Target year
        user: GitHub login the chart is about
        output_filename: Name of the output file, activity_<year>.png by default
    """
    df = monthly_activity(results, year)
    if not df.values.any():
        print("No data to plot")
        return

    fig, ax = setup_chart()
    ax.plot(df.index, df[AUTHORED], label="Authored", color="blue", marker="o", linestyle="-")
    ax.plot(df.index, df[MERGED], label="Merged", color="green", marker="x", linestyle="--")

    ax.set_xlabel("Month")
    ax.set_ylabel("Number of Pull Requests")
    plt.title(f"Pull Request Activity of {user} in {year}")
    ax.legend(loc="upper left")

    save_chart(output_filename or f"activity_{year}.png")
