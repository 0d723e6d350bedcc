from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from highcard.engine.match import MatchConfig, MatchError, check_config
from highcard.engine.rating import RatingConfig
from highcard.engine.types import GAME_MODES


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_section(obj: Mapping[str, object], key: str) -> Mapping[str, object]:
    v = obj.get(key)
    if not isinstance(v, dict):
        raise ContentError(f"Expected object for {key}")
    return v


def _int(obj: Mapping[str, object], key: str, default: int) -> int:
    v = obj.get(key, default)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


@dataclass(frozen=True)
class SessionConfig:
    ai_think_delay: float = 1.5
    season_id: str = "pre-season"


@dataclass(frozen=True)
class Rules:
    match: MatchConfig
    rating: RatingConfig
    session: SessionConfig

    @staticmethod
    def default() -> "Rules":
        return Rules(match=MatchConfig(), rating=RatingConfig(), session=SessionConfig())


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def schema(self, name: str) -> object:
        return _load_json(self._schema_dir / f"{name}.schema.json")

    def load_rules(self) -> Rules:
        path = self._data_dir / "rules.json"
        raw = _load_json(path)
        validate_json(raw, self.schema("rules"), context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("rules.json must be an object")

        m = _require_section(raw, "match")
        defaults = MatchConfig()
        match_cfg = MatchConfig(
            max_rounds=_int(m, "max_rounds", defaults.max_rounds),
            regular_per_hand=_int(m, "regular_per_hand", defaults.regular_per_hand),
            power_ups_per_hand=_int(m, "power_ups_per_hand", defaults.power_ups_per_hand),
            win_points=_int(m, "win_points", defaults.win_points),
            tie_points=_int(m, "tie_points", defaults.tie_points),
            loss_points=_int(m, "loss_points", defaults.loss_points),
        )
        for mode in GAME_MODES:
            try:
                check_config(match_cfg, mode)
            except MatchError as e:
                raise ContentError(f"Invalid match rules in {path}: {e}") from e

        r = _require_section(raw, "rating")
        rdefaults = RatingConfig()
        rating_cfg = RatingConfig(
            k_factor=_int(r, "k_factor", rdefaults.k_factor),
            placement_matches=_int(r, "placement_matches", rdefaults.placement_matches),
            opponent_jitter=_int(r, "opponent_jitter", rdefaults.opponent_jitter),
        )

        s = _require_section(raw, "session")
        delay = s.get("ai_think_delay", SessionConfig.ai_think_delay)
        if not isinstance(delay, (int, float)):
            raise ContentError("ai_think_delay must be number")
        season = s.get("season_id", SessionConfig.season_id)
        if not isinstance(season, str):
            raise ContentError("season_id must be string")
        session_cfg = SessionConfig(ai_think_delay=float(delay), season_id=season)

        return Rules(match=match_cfg, rating=rating_cfg, session=session_cfg)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_rules()
        for name in ("rules", "profiles"):
            try:
                Draft202012Validator.check_schema(self.schema(name))
            except SchemaError as e:
                raise ContentError(f"Invalid schema {name}: {e.message}") from e
