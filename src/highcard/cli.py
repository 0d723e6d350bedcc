from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from dataclasses import replace

from highcard.engine.cards import regular_cards
from highcard.engine.match import MatchError, is_complete
from highcard.paths import get_paths
from highcard.services.content import ContentError, ContentService, Rules
from highcard.services.profiles import LocalProfileStore, ProfileStoreError
from highcard.services.telemetry import TelemetryService
from highcard.session import GameSession, MatchOutcome

LOGGER = logging.getLogger("highcard")


async def _simulate(session: GameSession, rng: random.Random) -> MatchOutcome:
    try:
        while not is_complete(session.state):
            hand = session.human.hand
            # Stand-in for the human: any regular card, power-ups once those run out.
            options = regular_cards(hand) or hand
            await session.play_round(rng.choice(options).id)
    finally:
        session.close()
    return session.finalize()


def _load_store(content: ContentService) -> LocalProfileStore:
    paths = get_paths()
    return LocalProfileStore(paths.userdata_dir / "profiles.json", content.schema("profiles"))


def cmd_simulate(args: argparse.Namespace, content: ContentService, rules: Rules) -> int:
    rules = replace(rules, session=replace(rules.session, ai_think_delay=args.delay))
    store = None
    user_id = None
    name = args.user or "Player"
    if args.user:
        store = _load_store(content)
        user = store.find_by_username(args.user) or store.create_user(args.user)
        user_id = user.id

    telemetry = TelemetryService(get_paths().userdata_dir / "telemetry.jsonl") if args.telemetry else None
    session = GameSession.start(
        args.mode,
        args.ranked,
        name,
        rules=rules,
        seed=args.seed,
        store=store,
        user_id=user_id,
        telemetry=telemetry,
    )
    outcome = asyncio.run(_simulate(session, random.Random(args.seed)))
    print(json.dumps(outcome.result, indent=2, ensure_ascii=False))
    return 0


def cmd_validate(args: argparse.Namespace, content: ContentService, rules: Rules) -> int:
    content.validate_all()
    print("Content OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="highcard")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every round")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Play a full match headlessly and print the result")
    sim.add_argument("--mode", choices=["1v1", "2v2"], default="1v1")
    sim.add_argument("--ranked", action="store_true")
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--user", default=None, help="Record the result for this local profile")
    sim.add_argument("--delay", type=float, default=0.0, help="Bot thinking delay in seconds")
    sim.add_argument("--telemetry", action="store_true", help="Append events to userdata/telemetry.jsonl")
    sim.set_defaults(func=cmd_simulate)

    val = sub.add_parser("validate", help="Validate rules and schemas")
    val.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    try:
        rules = content.load_rules()
        return args.func(args, content, rules)
    except (ContentError, MatchError, ProfileStoreError) as e:
        LOGGER.error("%s", e)
        return 1
