from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Protocol

from highcard.engine.rating import RankRecord
from highcard.engine.types import GAME_MODES, TIERS, GameMode

from .content import ContentError, validate_json

LOGGER = logging.getLogger("highcard.profiles")

DEFAULT_SEASON = "pre-season"
USERNAME_RE = re.compile(r"^[a-zA-Z0-9]{3,20}$")


class ProfileStoreError(RuntimeError):
    pass


def rank_from_dict(d: Mapping[str, object]) -> RankRecord:
    def num(key: str, default: int) -> int:
        v = d.get(key, default)
        return int(v) if isinstance(v, int) else default

    tier = d.get("rank", "Bronze")
    if tier not in TIERS:
        raise ProfileStoreError(f"Unknown rank tier: {tier}")
    return RankRecord(
        mmr=max(0, num("mmr", 0)),
        tier=tier,  # type: ignore[arg-type]
        division=num("division", 1),
        placement_matches=num("placementMatches", 0),
        games_played=num("gamesPlayed", 0),
        wins=num("wins", 0),
    )


def rank_to_dict(r: RankRecord) -> dict[str, object]:
    return {
        "mmr": r.mmr,
        "rank": r.tier,
        "division": r.division,
        "placementMatches": r.placement_matches,
        "gamesPlayed": r.games_played,
        "wins": r.wins,
    }


@dataclass
class UserProfile:
    id: str
    username: str
    created_at: str
    email: str | None = None
    level: int = 1
    total_games: int = 0
    total_wins: int = 0

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "UserProfile":
        uid = d.get("id")
        name = d.get("username")
        created = d.get("createdAt")
        if not isinstance(uid, str) or not isinstance(name, str) or not isinstance(created, str):
            raise ProfileStoreError("Invalid user record")
        email = d.get("email")
        return UserProfile(
            id=uid,
            username=name,
            created_at=created,
            email=email if isinstance(email, str) else None,
            level=int(d.get("level", 1)),  # type: ignore[arg-type]
            total_games=int(d.get("totalGames", 0)),  # type: ignore[arg-type]
            total_wins=int(d.get("totalWins", 0)),  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "level": self.level,
            "totalGames": self.total_games,
            "totalWins": self.total_wins,
            "createdAt": self.created_at,
        }


@dataclass
class PlayerSeason:
    user_id: str
    season_id: str
    ranks: dict[str, RankRecord] = field(default_factory=dict)
    season_wins: dict[str, int] = field(default_factory=dict)
    rewards_earned: list[str] = field(default_factory=list)

    @staticmethod
    def initial(user_id: str, season_id: str) -> "PlayerSeason":
        return PlayerSeason(
            user_id=user_id,
            season_id=season_id,
            ranks={mode: RankRecord() for mode in GAME_MODES},
            season_wins={mode: 0 for mode in GAME_MODES},
        )

    def rank(self, mode: GameMode) -> RankRecord:
        return self.ranks.get(mode, RankRecord())

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "PlayerSeason":
        uid = d.get("userId")
        sid = d.get("seasonId")
        if not isinstance(uid, str) or not isinstance(sid, str):
            raise ProfileStoreError("Invalid player season record")
        ranks: dict[str, RankRecord] = {}
        ranks_raw = d.get("ranks", {})
        if isinstance(ranks_raw, dict):
            for mode, r in ranks_raw.items():
                if isinstance(mode, str) and isinstance(r, dict):
                    ranks[mode] = rank_from_dict(r)
        wins: dict[str, int] = {}
        rewards: list[str] = []
        rewards_raw = d.get("seasonRewards", {})
        if isinstance(rewards_raw, dict):
            wins_raw = rewards_raw.get("wins", {})
            if isinstance(wins_raw, dict):
                wins = {k: v for k, v in wins_raw.items() if isinstance(k, str) and isinstance(v, int)}
            earned = rewards_raw.get("rewardsEarned", [])
            if isinstance(earned, list):
                rewards = [str(x) for x in earned]
        return PlayerSeason(user_id=uid, season_id=sid, ranks=ranks, season_wins=wins, rewards_earned=rewards)

    def to_dict(self) -> dict[str, object]:
        return {
            "userId": self.user_id,
            "seasonId": self.season_id,
            "ranks": {mode: rank_to_dict(r) for mode, r in self.ranks.items()},
            "seasonRewards": {"wins": dict(self.season_wins), "rewardsEarned": list(self.rewards_earned)},
        }


class ProfileStore(Protocol):
    """Account/season storage the game reports results to."""

    def get_user_data(self, user_id: str) -> UserProfile | None: ...

    def get_player_season_data(self, user_id: str, season_id: str = DEFAULT_SEASON) -> PlayerSeason | None: ...

    def update_player_rank(
        self, user_id: str, mode: GameMode, record: RankRecord, season_id: str = DEFAULT_SEASON
    ) -> None: ...

    def update_game_stats(self, user_id: str, won: bool) -> None: ...


def _season_key(user_id: str, season_id: str) -> str:
    return f"{user_id}_{season_id}"


class LocalProfileStore:
    """ProfileStore backed by one JSON document on disk.

    The document is validated against profiles.schema.json on load and before
    every write.
    """

    def __init__(self, path: Path, schema: object) -> None:
        self._path = path
        self._schema = schema
        self.users: dict[str, UserProfile] = {}
        self.seasons: dict[str, PlayerSeason] = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ProfileStoreError(f"Invalid JSON in {self._path}: {e}") from e
        try:
            validate_json(raw, self._schema, context=str(self._path))
        except ContentError as e:
            raise ProfileStoreError(str(e)) from e
        if not isinstance(raw, dict):
            raise ProfileStoreError(f"{self._path} must hold a JSON object")
        for uid, u in raw.get("users", {}).items():
            self.users[uid] = UserProfile.from_dict(u)
        for key, s in raw.get("player_seasons", {}).items():
            self.seasons[key] = PlayerSeason.from_dict(s)
        LOGGER.debug("Loaded %d profiles from %s", len(self.users), self._path)

    def to_dict(self) -> dict[str, object]:
        return {
            "version": 1,
            "users": {uid: u.to_dict() for uid, u in self.users.items()},
            "player_seasons": {k: s.to_dict() for k, s in self.seasons.items()},
        }

    def save(self) -> None:
        doc = self.to_dict()
        try:
            validate_json(doc, self._schema, context=str(self._path))
        except ContentError as e:
            raise ProfileStoreError(str(e)) from e
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")

    # -------- Accounts --------
    def find_by_username(self, username: str) -> UserProfile | None:
        for u in self.users.values():
            if u.username == username:
                return u
        return None

    def create_user(self, username: str, email: str | None = None, season_id: str = DEFAULT_SEASON) -> UserProfile:
        if not USERNAME_RE.match(username):
            raise ProfileStoreError(
                "Username must be 3-20 characters, English letters and numbers only, no spaces"
            )
        if self.find_by_username(username) is not None:
            raise ProfileStoreError("Username already taken")
        user = UserProfile(
            id=uuid.uuid4().hex,
            username=username,
            email=email,
            created_at=datetime.now(tz=timezone.utc).isoformat(),
        )
        self.users[user.id] = user
        self.seasons[_season_key(user.id, season_id)] = PlayerSeason.initial(user.id, season_id)
        self.save()
        LOGGER.info("Created user %s (%s)", username, user.id)
        return user

    # -------- ProfileStore --------
    def get_user_data(self, user_id: str) -> UserProfile | None:
        return self.users.get(user_id)

    def get_player_season_data(self, user_id: str, season_id: str = DEFAULT_SEASON) -> PlayerSeason | None:
        return self.seasons.get(_season_key(user_id, season_id))

    def update_player_rank(
        self, user_id: str, mode: GameMode, record: RankRecord, season_id: str = DEFAULT_SEASON
    ) -> None:
        if user_id not in self.users:
            raise ProfileStoreError(f"Unknown user: {user_id}")
        key = _season_key(user_id, season_id)
        season = self.seasons.get(key)
        if season is None:
            season = PlayerSeason.initial(user_id, season_id)
            self.seasons[key] = season
        season.ranks[mode] = record
        season.season_wins[mode] = record.wins
        self.save()
        LOGGER.info(
            "Rank for %s/%s: %s %d (mmr %d)", user_id, mode, record.tier, record.division, record.mmr
        )

    def update_game_stats(self, user_id: str, won: bool) -> None:
        user = self.users.get(user_id)
        if user is None:
            # Same as the hosted store: stats for unknown users are dropped.
            LOGGER.warning("update_game_stats for unknown user %s", user_id)
            return
        user.total_games += 1
        if won:
            user.total_wins += 1
        self.save()
