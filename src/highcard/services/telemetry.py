from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from highcard.engine.match import MatchState, RoundResult, final_scores
from highcard.engine.serialize import round_result_to_dict


@dataclass
class TelemetryService:
    """Append-only JSONL log of match lifecycle events."""

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def match_started(self, state: MatchState) -> None:
        self.log(
            "match_started",
            {"match_id": state.id, "mode": state.mode, "ranked": state.is_ranked, "seed": state.seed},
        )

    def round_resolved(self, state: MatchState, result: RoundResult) -> None:
        self.log("round_resolved", {"match_id": state.id, **round_result_to_dict(result)})

    def match_finished(self, state: MatchState, won: bool, mmr_delta: int | None) -> None:
        self.log(
            "match_finished",
            {
                "match_id": state.id,
                "won": won,
                "scores": final_scores(state),
                "mmr_delta": mmr_delta,
            },
        )
