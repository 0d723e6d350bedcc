from __future__ import annotations

import json
from pathlib import Path

import pytest

from highcard.engine.rating import RankRecord
from highcard.paths import get_paths
from highcard.services.content import ContentService
from highcard.services.profiles import LocalProfileStore, ProfileStoreError


def _schema() -> object:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).schema("profiles")


def _store(tmp_path: Path) -> LocalProfileStore:
    return LocalProfileStore(tmp_path / "profiles.json", _schema())


def test_create_user_persists(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.create_user("Alice42", email="alice@example.com")
    assert (tmp_path / "profiles.json").exists()

    reloaded = _store(tmp_path)
    again = reloaded.get_user_data(user.id)
    assert again is not None
    assert again.username == "Alice42"
    assert again.email == "alice@example.com"
    assert (again.level, again.total_games, again.total_wins) == (1, 0, 0)
    assert reloaded.find_by_username("Alice42") == again

    season = reloaded.get_player_season_data(user.id)
    assert season is not None
    assert season.rank("1v1") == RankRecord()
    assert season.rank("2v2") == RankRecord()
    assert season.season_wins == {"1v1": 0, "2v2": 0}


@pytest.mark.parametrize("name", ["ab", "has space", "x" * 21, "émile", ""])
def test_bad_usernames_rejected(tmp_path: Path, name: str) -> None:
    store = _store(tmp_path)
    with pytest.raises(ProfileStoreError, match="Username must be"):
        store.create_user(name)
    assert store.users == {}


def test_duplicate_username_rejected(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.create_user("Bob")
    with pytest.raises(ProfileStoreError, match="already taken"):
        store.create_user("Bob")


def test_game_stats(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.create_user("Carol")
    store.update_game_stats(user.id, True)
    store.update_game_stats(user.id, False)

    again = _store(tmp_path).get_user_data(user.id)
    assert again is not None
    assert (again.total_games, again.total_wins) == (2, 1)


def test_stats_for_unknown_user_are_ignored(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.update_game_stats("nobody", True)
    assert store.users == {}
    assert not (tmp_path / "profiles.json").exists()


def test_rank_update_persists(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.create_user("Dave")
    record = RankRecord(mmr=420, tier="Silver", division=2, placement_matches=3, games_played=3, wins=2)
    store.update_player_rank(user.id, "2v2", record)

    season = _store(tmp_path).get_player_season_data(user.id)
    assert season is not None
    assert season.rank("2v2") == record
    assert season.rank("1v1") == RankRecord()
    assert season.season_wins["2v2"] == 2


def test_rank_update_creates_missing_season(tmp_path: Path) -> None:
    store = _store(tmp_path)
    user = store.create_user("Erin")
    store.update_player_rank(user.id, "1v1", RankRecord(mmr=16, games_played=1, wins=1), season_id="season-1")

    season = store.get_player_season_data(user.id, "season-1")
    assert season is not None
    assert season.rank("1v1").mmr == 16
    assert season.season_wins == {"1v1": 1, "2v2": 0}


def test_rank_update_unknown_user(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(ProfileStoreError, match="Unknown user"):
        store.update_player_rank("nobody", "1v1", RankRecord())


def test_corrupt_store_rejected(tmp_path: Path) -> None:
    path = tmp_path / "profiles.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(ProfileStoreError, match="Invalid JSON"):
        LocalProfileStore(path, _schema())

    path.write_text(json.dumps({"version": 1, "users": {}}), encoding="utf-8")
    with pytest.raises(ProfileStoreError, match="Schema validation failed"):
        LocalProfileStore(path, _schema())


def test_store_must_be_an_object(tmp_path: Path) -> None:
    path = tmp_path / "profiles.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ProfileStoreError):
        LocalProfileStore(path, _schema())
