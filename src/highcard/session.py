from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass

from highcard.engine.ai import take_ai_turns
from highcard.engine.match import (
    HUMAN_ID,
    MatchError,
    MatchState,
    PlayerState,
    RoundResult,
    advance_round,
    human_won,
    is_complete,
    is_round_complete,
    new_match,
    submit_card,
)
from highcard.engine.rating import RankedUpdate, RankRecord, apply_ranked_result
from highcard.engine.serialize import match_result
from highcard.engine.types import GameMode
from highcard.services.content import Rules
from highcard.services.profiles import ProfileStore
from highcard.services.telemetry import TelemetryService

LOGGER = logging.getLogger("highcard.session")

# GameSession drives one match: the human submits, bots answer after a short
# thinking delay, rounds advance, and the result is rated once at the end.
# The engine stays pure; every store and telemetry call happens here.


@dataclass(frozen=True)
class MatchOutcome:
    won: bool
    ranked: RankedUpdate | None
    result: dict[str, object]


class GameSession:
    def __init__(
        self,
        state: MatchState,
        *,
        rules: Rules | None = None,
        store: ProfileStore | None = None,
        user_id: str | None = None,
        telemetry: TelemetryService | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.state = state
        self.rules = rules or Rules.default()
        self.store = store
        self.user_id = user_id
        self.telemetry = telemetry
        # Rating RNG is kept apart from the match RNG so replays stay stable.
        self._rng = rng or random.Random()
        self._pending: asyncio.TimerHandle | None = None
        self._round_waiter: asyncio.Future[RoundResult] | None = None
        self._ranked: RankedUpdate | None = None
        self._stats_reported = False
        self._outcome: MatchOutcome | None = None
        self._closed = False
        if self.telemetry is not None:
            self.telemetry.match_started(state)
        LOGGER.info("Match %s started (%s, ranked=%s)", state.id, state.mode, state.is_ranked)

    @classmethod
    def start(
        cls,
        mode: GameMode,
        is_ranked: bool,
        human_name: str,
        *,
        rules: Rules | None = None,
        seed: int | None = None,
        store: ProfileStore | None = None,
        user_id: str | None = None,
        telemetry: TelemetryService | None = None,
        rng: random.Random | None = None,
    ) -> "GameSession":
        rules = rules or Rules.default()
        state = new_match(mode, is_ranked, human_name, seed=seed, config=rules.match)
        return cls(state, rules=rules, store=store, user_id=user_id, telemetry=telemetry, rng=rng)

    @property
    def human(self) -> PlayerState:
        return self.state.player(HUMAN_ID)

    @property
    def outcome(self) -> MatchOutcome | None:
        return self._outcome

    @property
    def ai_pending(self) -> bool:
        return self._pending is not None

    @property
    def closed(self) -> bool:
        return self._closed

    # -------- Driving loop --------
    def submit(self, card_id: str) -> None:
        """Play a card from the human's hand and schedule the bots' answers.

        Must be called from inside a running event loop.
        """
        if self._closed:
            raise MatchError("Session is closed.")
        idx = self.human.find_card(card_id)
        if idx is None:
            raise MatchError(f"Card {card_id} is not in {HUMAN_ID}'s hand.")
        submit_card(self.state, HUMAN_ID, self.human.hand[idx])
        self._schedule_ai()

    async def play_round(self, card_id: str) -> RoundResult:
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[RoundResult] = loop.create_future()
        self._round_waiter = waiter
        try:
            self.submit(card_id)
        except MatchError:
            self._round_waiter = None
            raise
        return await waiter

    def _schedule_ai(self) -> None:
        if self._pending is not None:
            return
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.rules.session.ai_think_delay, self._ai_move)

    def _ai_move(self) -> None:
        self._pending = None
        # The match may have been torn down while the bots were "thinking".
        if self._closed or is_complete(self.state):
            return
        try:
            played = take_ai_turns(self.state)
            LOGGER.debug("Round %d: bots played %s", self.state.current_round, played)
            if is_round_complete(self.state):
                self._complete_round()
        except Exception as exc:
            waiter, self._round_waiter = self._round_waiter, None
            if waiter is None or waiter.done():
                raise
            waiter.set_exception(exc)

    def _complete_round(self) -> None:
        result = advance_round(self.state)
        LOGGER.info(
            "Round %d resolved: winner=%s",
            result.round,
            result.winner.token if result.winner is not None else "tie",
        )
        if self.telemetry is not None:
            self.telemetry.round_resolved(self.state, result)
        if is_complete(self.state):
            self.finalize()
        waiter, self._round_waiter = self._round_waiter, None
        if waiter is not None and not waiter.done():
            waiter.set_result(result)

    def close(self) -> None:
        self._closed = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        waiter, self._round_waiter = self._round_waiter, None
        if waiter is not None and not waiter.done():
            waiter.cancel()

    # -------- Results --------
    def _current_rank(self) -> RankRecord:
        if self.store is None or self.user_id is None:
            return RankRecord()
        season = self.store.get_player_season_data(self.user_id, self.rules.session.season_id)
        if season is None:
            return RankRecord()
        return season.rank(self.state.mode)

    def finalize(self) -> MatchOutcome:
        """Report the finished match. Safe to call repeatedly: the first call wins."""
        if self._outcome is not None:
            return self._outcome
        if not is_complete(self.state):
            raise MatchError("Match is still in progress.")

        won = human_won(self.state)
        # The synthetic opponent is drawn once; a retry after a failed store
        # write reuses it.
        if self.state.is_ranked and self._ranked is None:
            self._ranked = apply_ranked_result(self._current_rank(), won, self._rng, self.rules.rating)
        ranked = self._ranked

        if self.store is not None and self.user_id is not None:
            # A retry after a failed rank write must not count the game twice.
            if not self._stats_reported:
                self.store.update_game_stats(self.user_id, won)
                self._stats_reported = True
            if ranked is not None:
                self.store.update_player_rank(
                    self.user_id, self.state.mode, ranked.record, self.rules.session.season_id
                )

        self._outcome = MatchOutcome(won=won, ranked=ranked, result=match_result(self.state, ranked))
        if self.telemetry is not None:
            self.telemetry.match_finished(self.state, won, ranked.mmr_delta if ranked else None)
        LOGGER.info(
            "Match %s finished: %s%s",
            self.state.id,
            "won" if won else "lost",
            f" ({ranked.mmr_delta:+d} MMR)" if ranked else "",
        )
        return self._outcome
