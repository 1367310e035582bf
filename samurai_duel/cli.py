"""CLI entry point – play / simulate / stats / replay / cards subcommands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from samurai_duel.cards import list_cards
from samurai_duel.display import (
    render_cards, render_events, render_result, render_snapshot, render_stats,
)
from samurai_duel.engine import BattleEngine
from samurai_duel.loader import (
    DEFAULT_DECKS, DEFAULT_FIGHTERS, DEFAULT_OPPONENTS,
    load_decks, load_fighters, load_opponents,
)
from samurai_duel.models import AIModifiers, BattleConfig
from samurai_duel.replay import ReplayWriter, render_replay
from samurai_duel.simulation import (
    DEFAULT_DT, Contender, aggregate, load_records, run_batch, run_to_completion,
)
from samurai_duel.telemetry import BattleTelemetry, TelemetryConfig, save_summaries


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="samurai_duel",
                                     description="Deck-driven duel simulator")
    sub = parser.add_subparsers(dest="command")

    def add_content_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--fighters", default=str(DEFAULT_FIGHTERS), help="fighters.json")
        p.add_argument("--decks-dir", default=str(DEFAULT_DECKS), help="Deck JSON directory")
        p.add_argument("--config", default=None, help="Battle config JSON")
        p.add_argument("--dt", type=float, default=DEFAULT_DT, help="Tick length (seconds)")

    # --- play ---
    p_play = sub.add_parser("play", help="Run a single battle")
    add_content_args(p_play)
    p_play.add_argument("--fighter", required=True, help="Player fighter id")
    p_play.add_argument("--deck", required=True, help="Player deck id")
    p_play.add_argument("--opponent", required=True, help="Opponent id")
    p_play.add_argument("--opponents", default=str(DEFAULT_OPPONENTS), help="opponents.json")
    p_play.add_argument("--seed", type=int, default=42)
    p_play.add_argument("--replay", default=None, help="Write a JSONL replay here")
    p_play.add_argument("--snapshots", type=int, default=0,
                        help="Write a tick snapshot to the replay every N ticks")
    p_play.add_argument("--telemetry", action="store_true", help="Print telemetry summary")
    p_play.add_argument("--telemetry-out", default=None,
                        help="Also save the telemetry summary as JSON here")

    # --- simulate ---
    p_sim = sub.add_parser("simulate", help="Run a round-robin batch")
    add_content_args(p_sim)
    p_sim.add_argument("--contenders", nargs="+", required=True,
                       help="fighter_id:deck_id pairs")
    p_sim.add_argument("--battles", type=int, default=20, help="Battles per pair")
    p_sim.add_argument("--seed", type=int, default=42)
    p_sim.add_argument("--mistake-chance", type=float, default=0.0)
    p_sim.add_argument("--output", default="output/", help="Output directory")
    p_sim.add_argument("--trace", action="store_true", help="Include event logs in output")
    p_sim.add_argument("--telemetry", choices=["on", "off"], default="off")

    # --- stats ---
    p_stats = sub.add_parser("stats", help="Show stats from battle logs")
    p_stats.add_argument("--logs", required=True, help="Path to battle_logs.json")

    # --- replay ---
    p_rep = sub.add_parser("replay", help="Render a replay file")
    p_rep.add_argument("file", help="Replay JSONL path")
    p_rep.add_argument("--from-time", type=float, default=None)
    p_rep.add_argument("--to-time", type=float, default=None)
    p_rep.add_argument("--compact", action="store_true")

    # --- cards ---
    sub.add_parser("cards", help="List the card library")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "play":
            _cmd_play(args)
        elif args.command == "simulate":
            _cmd_simulate(args)
        elif args.command == "stats":
            _cmd_stats(args)
        elif args.command == "replay":
            render_replay(args.file, args.from_time, args.to_time, args.compact)
        elif args.command == "cards":
            render_cards(list_cards())
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)


def _load_config(path: str | None) -> BattleConfig:
    return BattleConfig.from_json(path) if path else BattleConfig()


def _cmd_play(args: argparse.Namespace) -> None:
    fighters = load_fighters(args.fighters)
    decks = load_decks(args.decks_dir)
    opponents = load_opponents(args.opponents, fighters, decks)

    if args.fighter not in fighters:
        raise ValueError(f"unknown fighter '{args.fighter}' (have: {sorted(fighters)})")
    if args.deck not in decks:
        raise ValueError(f"unknown deck '{args.deck}' (have: {sorted(decks)})")
    if args.opponent not in opponents:
        raise ValueError(f"unknown opponent '{args.opponent}' (have: {sorted(opponents)})")
    opp = opponents[args.opponent]

    tcfg = TelemetryConfig(
        enabled=args.telemetry or args.telemetry_out is not None,
        save_battle_summaries=args.telemetry_out is not None,
        output_path=args.telemetry_out,
    )
    telemetry = BattleTelemetry() if tcfg.enabled else None
    writer = ReplayWriter(Path(args.replay)) if args.replay else None
    try:
        if writer:
            writer.write({
                "type": "meta",
                "seed": args.seed,
                "fighters": [fighters[args.fighter].name, opp.fighter.name],
                "decks": [args.deck, opp.deck.deck_id],
            })
        engine = BattleEngine(
            fighters[args.fighter], decks[args.deck], opp.fighter, opp.deck,
            player_ai=AIModifiers(), enemy_ai=opp.ai,
            config=_load_config(args.config), seed=args.seed,
            telemetry=telemetry, replay=writer, snapshot_every=args.snapshots,
        )
        run_to_completion(engine, args.dt)
    finally:
        if writer:
            writer.close()

    render_snapshot(engine.snapshot())
    render_events(engine.events)
    render_result(engine.result())

    if telemetry:
        summary = telemetry.to_summary()
        if args.telemetry:
            for key, value in summary.items():
                print(f"  {key:28s} {value}")
        saved = save_summaries([summary], tcfg)
        if saved:
            print(f"Telemetry written to: {saved}")
    if writer:
        print(f"Replay written to: {writer.path}")


def _parse_contender(pair: str, fighters, decks, ai: AIModifiers) -> Contender:
    if ":" not in pair:
        raise ValueError(f"contender must be fighter_id:deck_id, got '{pair}'")
    fighter_id, deck_id = (s.strip() for s in pair.split(":", 1))
    if fighter_id not in fighters:
        raise ValueError(f"unknown fighter '{fighter_id}'")
    if deck_id not in decks:
        raise ValueError(f"unknown deck '{deck_id}'")
    return Contender(pair, fighters[fighter_id], decks[deck_id], ai)


def _cmd_simulate(args: argparse.Namespace) -> None:
    fighters = load_fighters(args.fighters)
    decks = load_decks(args.decks_dir)
    ai = AIModifiers(mistake_chance=args.mistake_chance)
    contenders = [_parse_contender(s, fighters, decks, ai) for s in args.contenders]
    print(f"Loaded {len(contenders)} contenders: {[c.contender_id for c in contenders]}")

    records = run_batch(
        contenders, args.battles, args.seed, dt=args.dt,
        config=_load_config(args.config), output_dir=args.output,
        telemetry_enabled=args.telemetry == "on", trace=args.trace,
    )
    render_stats(aggregate(records))
    print(f"Logs written to: {Path(args.output) / 'battle_logs.json'}")


def _cmd_stats(args: argparse.Namespace) -> None:
    render_stats(aggregate(load_records(args.logs)))


if __name__ == "__main__":
    main()
