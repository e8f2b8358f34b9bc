import json

import pytest

import github_api
from config import ActivityConfig
from github_api import GitHubAPI

BASE_URL = "https://api.github.com"


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.content = body if isinstance(body, bytes) else json.dumps(body).encode()

    def json(self):
        return json.loads(self.content)


class FakeGitHub:
    """Stands in for requests.get, serving canned bodies by URL."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.sleeps = []

    def add(self, url, body, status_code=200):
        self.routes[url] = FakeResponse(status_code, body)

    def add_pulls(self, repo, page, pulls):
        self.add(f"{BASE_URL}/repos/{repo}/pulls?state=all&page={page}", pulls)

    def add_events(self, repo, number, events):
        self.add(f"{BASE_URL}/repos/{repo}/issues/{number}/events", events)

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        if url not in self.routes:
            return FakeResponse(404, {"message": "Not Found"})
        return self.routes[url]


def pull(number, login, created_at, state="closed", title=None):
    return {
        "number": number,
        "html_url": f"https://github.com/octo/demo/pull/{number}",
        "created_at": created_at,
        "merged_at": None,
        "state": state,
        "title": title or f"Change {number}",
        "user": {"login": login},
    }


def merged_by(login):
    return [
        {"actor": {"login": login}, "event": "referenced"},
        {"actor": {"login": login}, "event": "merged"},
        {"actor": {"login": login}, "event": "closed"},
    ]


@pytest.fixture
def fake_github(monkeypatch):
    fake = FakeGitHub()
    monkeypatch.setattr(github_api.requests, "get", fake.get)
    monkeypatch.setattr(github_api.time, "sleep", fake.sleeps.append)
    return fake


@pytest.fixture
def config(tmp_path):
    return ActivityConfig(user="mpenkov", year=2021, cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def github(config, fake_github):
    return GitHubAPI(config)
