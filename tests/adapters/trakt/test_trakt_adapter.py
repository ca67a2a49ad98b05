from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

import httpx
import pytest

from episync.adapters.trakt import (
    TraktAPIError,
    TraktAuthState,
    TraktClient,
    TraktEpisodeSource,
    TraktSeasonsEpisodesSource,
    TraktWatchHistorySource,
)
from episync.adapters.trakt.client import PAGE_COUNT_HEADER
from episync.config import ResilienceConfig, TraktConfig
from episync.domain.model import EpisodeWatchEntry, PendingAction
from episync.domain.results import ErrorResult, Success
from tests.helpers.http import cached_response, make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable

SHOW_IDS = {1: 1390}
EPISODE_IDS = {10: 73640, 11: 73641}
WATCHED_AT = datetime(2025, 5, 1, 20, 0, tzinfo=UTC)


def _config(*, access_token: str | None = "token") -> TraktConfig:
    return TraktConfig(
        client_id="client-id",
        access_token=access_token,
        resilience=ResilienceConfig(
            name="trakt",
            base_url="https://api.trakt.tv",
            cache=None,
            default_headers={"trakt-api-version": "2", "trakt-api-key": "client-id"},
        ),
    )


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    access_token: str | None = "token",
) -> TraktClient:
    return TraktClient(
        config=_config(access_token=access_token),
        client_factory=make_client_factory(handler),
    )


def _history_source(client: TraktClient) -> TraktWatchHistorySource:
    return TraktWatchHistorySource(
        client=client, show_ids=SHOW_IDS.get, episode_ids=EPISODE_IDS.get
    )


@pytest.fixture
def seasons_payload() -> list[dict[str, object]]:
    return [
        {
            "number": 1,
            "ids": {"trakt": 3950, "tvdb": 364731, "tmdb": 3624},
            "rating": 8.9,
            "votes": 1200,
            "episode_count": 2,
            "aired_episodes": 2,
            "title": "Season 1",
            "overview": "Summers span decades.",
            "first_aired": "2011-04-18T01:00:00.000Z",
            "network": "HBO",
            "episodes": [
                {
                    "season": 1,
                    "number": 1,
                    "title": "Winter Is Coming",
                    "ids": {"trakt": 73640, "tvdb": 3254641, "imdb": "tt1480055", "tmdb": 63056},
                    "overview": "Ned Stark is torn.",
                    "rating": 8.5,
                    "votes": 900,
                    "first_aired": "2011-04-18T01:00:00.000Z",
                    "runtime": 62,
                },
                {
                    "season": 1,
                    "number": 2,
                    "title": "The Kingsroad",
                    "ids": {"trakt": 73641, "tmdb": 63057},
                    "first_aired": "2011-04-25T01:00:00.000Z",
                },
            ],
        }
    ]


def _history_item(history_id: int, episode_trakt_id: int | None) -> dict[str, object]:
    item: dict[str, object] = {
        "id": history_id,
        "watched_at": "2025-05-01T20:00:00.000Z",
        "action": "watch",
        "type": "episode" if episode_trakt_id is not None else "movie",
    }
    if episode_trakt_id is not None:
        item["episode"] = {"season": 1, "number": 1, "ids": {"trakt": episode_trakt_id}}
        item["show"] = {"title": "Game of Thrones", "year": 2011, "ids": {"trakt": 1390}}
    else:
        item["movie"] = {"title": "Not an episode", "ids": {"trakt": 1}}
    return item


def test_seasons_source_translates_season_tree(
    seasons_payload: list[dict[str, object]],
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=seasons_payload)

    source = TraktSeasonsEpisodesSource(client=_client(handler), show_ids=SHOW_IDS.get)

    result = source.get_seasons_episodes(1)

    assert isinstance(result, Success)
    assert result.response_modified
    [(season, episodes)] = result.data
    assert season.trakt_id == 3950
    assert season.tmdb_id == 3624
    assert season.network == "HBO"
    assert season.episodes_aired == 2
    assert season.trakt_rating == pytest.approx(8.9)
    assert [episode.trakt_id for episode in episodes] == [73640, 73641]
    assert episodes[0].first_aired == datetime(2011, 4, 18, 1, 0, tzinfo=UTC)
    assert episodes[0].tvdb_id == 3254641

    [request] = requests
    assert request.url.path == "/shows/1390/seasons"
    assert request.url.params["extended"] == "full,episodes"
    assert request.headers["trakt-api-key"] == "client-id"
    assert request.headers["trakt-api-version"] == "2"


def test_seasons_source_reports_cache_hits_as_not_modified(
    seasons_payload: list[dict[str, object]],
) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return cached_response(seasons_payload)

    source = TraktSeasonsEpisodesSource(client=_client(handler), show_ids=SHOW_IDS.get)

    result = source.get_seasons_episodes(1)

    assert isinstance(result, Success)
    assert not result.response_modified


def test_seasons_source_wraps_http_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "unavailable"})

    source = TraktSeasonsEpisodesSource(client=_client(handler), show_ids=SHOW_IDS.get)

    result = source.get_seasons_episodes(1)

    assert isinstance(result, ErrorResult)
    assert isinstance(result.error, TraktAPIError)
    assert result.error.status_code == 503


def test_seasons_source_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    source = TraktSeasonsEpisodesSource(client=_client(handler), show_ids=SHOW_IDS.get)

    result = source.get_seasons_episodes(1)

    assert isinstance(result, ErrorResult)
    assert isinstance(result.error, httpx.ConnectError)


def test_sources_do_not_call_remote_for_unmapped_show() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"unexpected request to {request.url}")

    client = _client(handler)

    assert isinstance(
        TraktSeasonsEpisodesSource(client=client, show_ids=SHOW_IDS.get).get_seasons_episodes(2),
        ErrorResult,
    )
    assert isinstance(
        TraktEpisodeSource(client=client, show_ids=SHOW_IDS.get).get_episode(2, 1, 1),
        ErrorResult,
    )
    assert isinstance(_history_source(client).get_show_episode_watches(2), ErrorResult)


def test_episode_source_fetches_single_episode() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "season": 1,
                "number": 3,
                "title": "Lord Snow",
                "ids": {"trakt": 73642},
                "rating": 8.1,
                "votes": 10,
            },
        )

    source = TraktEpisodeSource(client=_client(handler), show_ids=SHOW_IDS.get)

    result = source.get_episode(1, 1, 3)

    assert isinstance(result, Success)
    assert result.data.title == "Lord Snow"
    assert result.data.trakt_rating_votes == 10
    assert requests[0].url.path == "/shows/1390/seasons/1/episodes/3"
    assert requests[0].url.params["extended"] == "full"


def test_show_history_follows_pagination() -> None:
    pages: dict[str, httpx.Response] = {
        "1": httpx.Response(
            200,
            json=[_history_item(501, 73640)],
            headers={PAGE_COUNT_HEADER: "2"},
        ),
        "2": httpx.Response(
            200,
            json=[_history_item(502, 73641), _history_item(503, None)],
            headers={PAGE_COUNT_HEADER: "2"},
        ),
    }
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return pages[request.url.params["page"]]

    since = datetime(2025, 4, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    result = _history_source(_client(handler)).get_show_episode_watches(1, since)

    assert isinstance(result, Success)
    assert [(episode.trakt_id, entry.trakt_id) for episode, entry in result.data] == [
        (73640, 501),
        (73641, 502),
    ]
    assert all(entry.watched_at == WATCHED_AT for _, entry in result.data)
    assert all(entry.pending_action is PendingAction.NOTHING for _, entry in result.data)
    assert [request.url.path for request in requests] == ["/sync/history/shows/1390"] * 2
    assert requests[0].url.params["limit"] == "100"
    assert requests[0].url.params["start_at"] == "2025-04-01T12:00:00+00:00"
    assert requests[0].headers["Authorization"] == "Bearer token"


def test_episode_history_assigns_local_episode_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sync/history/episodes/73640"
        return httpx.Response(200, json=[_history_item(501, 73640)])

    result = _history_source(_client(handler)).get_episode_watches(10)

    assert isinstance(result, Success)
    assert [(entry.episode_id, entry.trakt_id) for entry in result.data] == [(10, 501)]


def test_history_without_access_token_fails_without_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"unexpected request to {request.url}")

    client = _client(handler, access_token=None)

    assert not TraktAuthState(client).is_authenticated()
    assert isinstance(_history_source(client).get_show_episode_watches(1), ErrorResult)


def test_auth_state_follows_access_token() -> None:
    client = _client(lambda _: httpx.Response(200, json=[]))

    assert TraktAuthState(client).is_authenticated()


def test_add_episode_watches_posts_history() -> None:
    bodies: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/sync/history"
        assert request.headers["Authorization"] == "Bearer token"
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json={"added": {"movies": 0, "episodes": 1}})

    entry = EpisodeWatchEntry(
        episode_id=10, watched_at=WATCHED_AT, pending_action=PendingAction.UPLOAD
    )

    result = _history_source(_client(handler)).add_episode_watches([entry])

    assert isinstance(result, Success)
    assert bodies == [
        {"episodes": [{"watched_at": "2025-05-01T20:00:00.000Z", "ids": {"trakt": 73640}}]}
    ]


def test_add_episode_watches_rejects_unmapped_episode() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"unexpected request to {request.url}")

    entry = EpisodeWatchEntry(episode_id=99, watched_at=WATCHED_AT)

    result = _history_source(_client(handler)).add_episode_watches([entry])

    assert isinstance(result, ErrorResult)


def test_remove_episode_watches_targets_history_ids_only() -> None:
    bodies: list[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/sync/history/remove"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"deleted": {"movies": 0, "episodes": 2}})

    entries = [
        EpisodeWatchEntry(episode_id=10, trakt_id=502, watched_at=WATCHED_AT),
        EpisodeWatchEntry(episode_id=10, trakt_id=501, watched_at=WATCHED_AT),
        EpisodeWatchEntry(episode_id=11, watched_at=WATCHED_AT),
    ]

    result = _history_source(_client(handler)).remove_episode_watches(entries)

    assert isinstance(result, Success)
    assert bodies == [{"ids": [501, 502]}]


def test_remove_episode_watches_without_history_ids_sends_nothing() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail(f"unexpected request to {request.url}")

    entries = [EpisodeWatchEntry(episode_id=10, watched_at=WATCHED_AT)]

    result = _history_source(_client(handler)).remove_episode_watches(entries)

    assert isinstance(result, Success)


def test_remove_episode_watches_reports_server_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401, json={"error": "invalid_grant", "error_description": "token expired"}
        )

    entries = [EpisodeWatchEntry(episode_id=10, trakt_id=501, watched_at=WATCHED_AT)]

    result = _history_source(_client(handler)).remove_episode_watches(entries)

    assert isinstance(result, ErrorResult)
    assert "token expired" in result.reason
