import pytest
import requests

import github_api
from conftest import BASE_URL, pull
from errors import CacheWriteError, FetchError, HTTPStatusError, PayloadDecodeError
from github_api import GitHubAPI
from github_cache import CacheKey, GitHubCache, EVENTS, PULLS


def test_fetch_returns_body_and_waits_after_the_call(github, fake_github):
    fake_github.add(f"{BASE_URL}/rate_limit", b'{"ok": true}')

    assert github.fetch(f"{BASE_URL}/rate_limit") == b'{"ok": true}'
    assert fake_github.sleeps == [5.0]


def test_fetch_uses_configured_delay(config, fake_github):
    config.rate_limit_delay = 0.5
    fake_github.add(f"{BASE_URL}/x", b"{}")

    GitHubAPI(config).fetch(f"{BASE_URL}/x")

    assert fake_github.sleeps == [0.5]


@pytest.mark.parametrize("status_code", [301, 403, 404, 500])
def test_fetch_rejects_non_success_status(github, fake_github, status_code):
    url = f"{BASE_URL}/repos/octo/demo/pulls?state=all&page=1"
    fake_github.add(url, {"message": "API rate limit exceeded"}, status_code=status_code)

    with pytest.raises(HTTPStatusError) as excinfo:
        github.fetch(url)

    assert excinfo.value.status_code == status_code
    assert excinfo.value.url == url
    assert f"HTTP {status_code}" in str(excinfo.value)
    assert fake_github.sleeps == []


def test_fetch_accepts_any_2xx_status(github, fake_github):
    fake_github.add(f"{BASE_URL}/x", b"[]", status_code=203)

    assert github.fetch(f"{BASE_URL}/x") == b"[]"


def test_fetch_transport_failure_is_not_retried(github, monkeypatch):
    calls = []

    def broken_get(url, headers=None, timeout=None):
        calls.append(url)
        raise requests.ConnectionError("Name or service not known")

    monkeypatch.setattr(github_api.requests, "get", broken_get)

    with pytest.raises(FetchError):
        github.fetch(f"{BASE_URL}/x")
    assert len(calls) == 1


def test_miss_fetches_once_and_populates_cache(github, fake_github):
    fake_github.add_pulls("octo/demo", 1, [pull(5, "mpenkov", "2021-03-01T00:00:00Z")])

    first = github.load_pull_page("octo/demo", 1)
    second = github.load_pull_page("octo/demo", 1)

    assert [p.number for p in first] == [5]
    assert first == second
    assert fake_github.calls == [f"{BASE_URL}/repos/octo/demo/pulls?state=all&page=1"]
    assert fake_github.sleeps == [5.0]
    assert github.cache.read(CacheKey("octo/demo", PULLS, 1)) is not None


def test_cached_entry_never_hits_the_network(config, fake_github):
    cache = GitHubCache(config.cache_dir)
    cache.write(CacheKey("octo/demo", EVENTS, 4), b'[{"actor": {"login": "mpenkov"}, "event": "merged"}]')

    events = GitHubAPI(config, cache=cache).load_events("octo/demo", 4)

    assert events[0].actor.login == "mpenkov"
    assert fake_github.calls == []
    assert fake_github.sleeps == []


def test_cache_keeps_the_raw_response_bytes(github, fake_github):
    body = b'[ {"actor": {"login": "a"}, "event": "merged", "extra": 1} ]'
    fake_github.add(f"{BASE_URL}/repos/octo/demo/issues/9/events", body)

    github.load_events("octo/demo", 9)

    assert github.cache.read(CacheKey("octo/demo", EVENTS, 9)) == body


def test_corrupted_cache_entry_is_not_refetched(github, fake_github):
    github.cache.write(CacheKey("octo/demo", PULLS, 1), b"{truncated")
    fake_github.add_pulls("octo/demo", 1, [])

    with pytest.raises(PayloadDecodeError) as excinfo:
        github.load_pull_page("octo/demo", 1)

    assert "corrupted cache entry" in str(excinfo.value)
    assert fake_github.calls == []


def test_malformed_fresh_response_is_cached_and_reported(github, fake_github):
    fake_github.add(f"{BASE_URL}/repos/octo/demo/issues/3/events", {"message": "moved"})

    with pytest.raises(PayloadDecodeError):
        github.load_events("octo/demo", 3)

    assert github.cache.read(CacheKey("octo/demo", EVENTS, 3)) == b'{"message": "moved"}'


def test_failed_fetch_writes_nothing(github, fake_github):
    with pytest.raises(HTTPStatusError):
        github.load_events("octo/demo", 404)

    assert github.cache.read(CacheKey("octo/demo", EVENTS, 404)) is None


def test_cache_write_failure_propagates(config, fake_github, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    config.cache_dir = str(blocker)
    fake_github.add_pulls("octo/demo", 1, [])

    with pytest.raises(CacheWriteError):
        GitHubAPI(config).load_pull_page("octo/demo", 1)


def test_load_commit(github, fake_github):
    fake_github.add(f"{BASE_URL}/repos/octo/demo/commits/abc", {"sha": "abc", "author": {"login": "mpenkov"}})

    assert github.load_commit("octo/demo", "abc").author.login == "mpenkov"
    assert github.load_commit("octo/demo", "abc").sha == "abc"
    assert len(fake_github.calls) == 1
