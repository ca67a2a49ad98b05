from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from episync.domain.model import EpisodeWatchEntry, PendingAction, Request
from tests.helpers.tv import NOW, actions, add_watches, episode_trakt_id, seed_show, watches_for

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from episync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    UowFactory = Callable[[], SqlAlchemyUnitOfWork]


def _remote(episode_id: int, trakt_id: int, watched_at: datetime = NOW) -> EpisodeWatchEntry:
    return EpisodeWatchEntry(episode_id=episode_id, trakt_id=trakt_id, watched_at=watched_at)


def test_save_show_seasons_wires_episodes_to_seasons(sqlite_unit_of_work: UowFactory) -> None:
    seeded = seed_show(sqlite_unit_of_work, seasons=2, episodes_per_season=2)

    with sqlite_unit_of_work() as uow:
        tree = uow.repositories.seasons_episodes.get_show_seasons_with_episodes(seeded.show_id)

    assert [season.number for season, _ in tree] == [1, 2]
    for season, episodes in tree:
        assert season.show_id == seeded.show_id
        assert [episode.number for episode in episodes] == [1, 2]
        assert {episode.season_id for episode in episodes} == {season.id}


def test_episode_id_lookup_by_trakt_id(sqlite_unit_of_work: UowFactory) -> None:
    seeded = seed_show(sqlite_unit_of_work, trakt_id=7)

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.seasons_episodes
        assert store.get_episode_id_for_trakt_id(episode_trakt_id(7, 1, 3)) == seeded.episode(1, 3)
        assert store.get_episode_id_for_trakt_id(999_999) is None


def test_sync_show_watch_entries_replaces_reconciled_set(sqlite_unit_of_work: UowFactory) -> None:
    seeded = seed_show(sqlite_unit_of_work)
    first, second = seeded.episode(1, 1), seeded.episode(1, 2)
    add_watches(
        sqlite_unit_of_work,
        first,
        (1, PendingAction.NOTHING),
        (2, PendingAction.NOTHING),
    )
    add_watches(sqlite_unit_of_work, second, (3, PendingAction.DELETE))
    moved = NOW - timedelta(days=2)

    with sqlite_unit_of_work() as uow:
        uow.repositories.episode_watches.sync_show_watch_entries(
            seeded.show_id,
            [
                _remote(first, 1, moved),
                _remote(second, 3),
                _remote(second, 4),
                _remote(second, 4),
            ],
        )
        uow.commit()

    first_watches = watches_for(sqlite_unit_of_work, first)
    assert [(w.trakt_id, w.watched_at) for w in first_watches] == [(1, moved)]
    second_watches = watches_for(sqlite_unit_of_work, second)
    assert sorted((w.trakt_id, w.pending_action) for w in second_watches) == [
        (3, PendingAction.DELETE),
        (4, PendingAction.NOTHING),
    ]


def test_sync_show_watch_entries_leaves_other_shows_alone(
    sqlite_unit_of_work: UowFactory,
) -> None:
    one = seed_show(sqlite_unit_of_work, trakt_id=1)
    two = seed_show(sqlite_unit_of_work, trakt_id=2, tmdb_id=2)
    add_watches(sqlite_unit_of_work, two.episode(1, 1), (20, PendingAction.NOTHING))

    with sqlite_unit_of_work() as uow:
        uow.repositories.episode_watches.sync_show_watch_entries(one.show_id, [])
        uow.commit()

    assert [w.trakt_id for w in watches_for(sqlite_unit_of_work, two.episode(1, 1))] == [20]


def test_sync_episode_watch_entries_keeps_pending_uploads(
    sqlite_unit_of_work: UowFactory,
) -> None:
    seeded = seed_show(sqlite_unit_of_work)
    episode_id = seeded.episode(1, 1)
    add_watches(
        sqlite_unit_of_work,
        episode_id,
        (None, PendingAction.UPLOAD),
        (5, PendingAction.NOTHING),
    )

    with sqlite_unit_of_work() as uow:
        uow.repositories.episode_watches.sync_episode_watch_entries(
            episode_id, [_remote(episode_id, 6)]
        )
        uow.commit()

    entries = watches_for(sqlite_unit_of_work, episode_id)
    assert sorted(
        (w.trakt_id or 0, w.pending_action) for w in entries
    ) == [(0, PendingAction.UPLOAD), (6, PendingAction.NOTHING)]


def test_upsert_remote_entries_never_deletes(sqlite_unit_of_work: UowFactory) -> None:
    seeded = seed_show(sqlite_unit_of_work)
    episode_id = seeded.episode(1, 1)
    add_watches(
        sqlite_unit_of_work,
        episode_id,
        (1, PendingAction.NOTHING),
        (2, PendingAction.DELETE),
        (3, PendingAction.NOTHING),
    )
    later = NOW + timedelta(days=1)

    with sqlite_unit_of_work() as uow:
        uow.repositories.episode_watches.upsert_remote_entries(
            [
                _remote(episode_id, 1, later),
                _remote(episode_id, 2, later),
                _remote(episode_id, 4, later),
                _remote(episode_id, 4, later),
            ]
        )
        uow.commit()

    entries = {w.trakt_id: w for w in watches_for(sqlite_unit_of_work, episode_id)}
    assert sorted(entries) == [1, 2, 3, 4]
    assert entries[1].watched_at == later
    assert entries[2].pending_action is PendingAction.DELETE
    assert entries[2].watched_at != later
    assert entries[4].pending_action is PendingAction.NOTHING


def test_has_episode_been_watched_ignores_pending_deletes(
    sqlite_unit_of_work: UowFactory,
) -> None:
    seeded = seed_show(sqlite_unit_of_work)
    deleted, uploaded = seeded.episode(1, 1), seeded.episode(1, 2)
    add_watches(sqlite_unit_of_work, deleted, (1, PendingAction.DELETE))
    add_watches(sqlite_unit_of_work, uploaded, (None, PendingAction.UPLOAD))

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.episode_watches
        assert not store.has_episode_been_watched(deleted)
        assert store.has_episode_been_watched(uploaded)
        assert not store.has_episode_been_watched(seeded.episode(1, 3))


def test_pending_entries_are_scoped_to_show(sqlite_unit_of_work: UowFactory) -> None:
    one = seed_show(sqlite_unit_of_work, trakt_id=1)
    two = seed_show(sqlite_unit_of_work, trakt_id=2, tmdb_id=2)
    add_watches(sqlite_unit_of_work, one.episode(1, 1), (None, PendingAction.UPLOAD))
    add_watches(sqlite_unit_of_work, two.episode(1, 1), (None, PendingAction.UPLOAD))
    add_watches(sqlite_unit_of_work, one.episode(1, 2), (9, PendingAction.DELETE))

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.episode_watches
        uploads = store.get_entries_with_pending_action(one.show_id, PendingAction.UPLOAD)
        deletes = store.get_entries_with_pending_action(one.show_id, PendingAction.DELETE)

    assert [entry.episode_id for entry in uploads] == [one.episode(1, 1)]
    assert [entry.trakt_id for entry in deletes] == [9]


def test_update_pending_action_and_delete_with_ids(sqlite_unit_of_work: UowFactory) -> None:
    seeded = seed_show(sqlite_unit_of_work)
    episode_id = seeded.episode(1, 1)
    saved = add_watches(
        sqlite_unit_of_work,
        episode_id,
        (None, PendingAction.UPLOAD),
        (None, PendingAction.UPLOAD),
    )
    first, second = (entry.id for entry in saved)
    assert first is not None
    assert second is not None

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.episode_watches
        store.update_pending_action([first], PendingAction.NOTHING)
        store.delete_with_ids([second])
        store.delete_with_ids([])
        uow.commit()

    assert actions(watches_for(sqlite_unit_of_work, episode_id)) == [PendingAction.NOTHING]


def test_delete_show_season_data_cascades_to_watches(sqlite_unit_of_work: UowFactory) -> None:
    one = seed_show(sqlite_unit_of_work, trakt_id=1)
    two = seed_show(sqlite_unit_of_work, trakt_id=2, tmdb_id=2)
    add_watches(sqlite_unit_of_work, one.episode(1, 1), (1, PendingAction.NOTHING))
    add_watches(sqlite_unit_of_work, two.episode(1, 1), (2, PendingAction.NOTHING))

    with sqlite_unit_of_work() as uow:
        uow.repositories.seasons_episodes.delete_show_season_data(one.show_id)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.seasons_episodes
        assert store.get_show_seasons_with_episodes(one.show_id) == []
        assert len(store.get_show_seasons_with_episodes(two.show_id)) == 1
        assert uow.repositories.shows.get(one.show_id) is not None
    assert watches_for(sqlite_unit_of_work, one.episode(1, 1)) == []
    assert len(watches_for(sqlite_unit_of_work, two.episode(1, 1))) == 1


def test_last_request_is_upserted_per_scope(sqlite_unit_of_work: UowFactory) -> None:
    later = NOW + timedelta(hours=3)

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.last_requests
        store.update_last_request(Request.SHOW_SEASONS, 1, NOW)
        store.update_last_request(Request.SHOW_SEASONS, 1, later)
        store.update_last_request(Request.SHOW_EPISODE_WATCHES, 1, NOW)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        store = uow.repositories.last_requests
        assert store.get_last_request(Request.SHOW_SEASONS, 1) == later
        assert store.get_last_request(Request.SHOW_EPISODE_WATCHES, 1) == NOW
        assert store.get_last_request(Request.SHOW_SEASONS, 2) is None
