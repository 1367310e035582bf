"""Replay recording (JSONL) and text playback."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class ReplayWriter:
    """Writes replay records as JSONL to a file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self._path, "w", encoding="utf-8")
        self._closed = False
        self.records_written = 0

    def write(self, record: dict[str, Any]) -> None:
        if self._closed:
            raise RuntimeError("ReplayWriter is closed")
        self._file.write(json.dumps(record, ensure_ascii=False) + "\n")
        self.records_written += 1

    def close(self) -> None:
        if not self._closed:
            self._file.close()
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def path(self) -> Path:
        return self._path

    def __enter__(self) -> "ReplayWriter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def load_replay(path: str | Path) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    with open(Path(path), encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def _fighter_line(label: str, f: dict[str, Any]) -> str:
    return (f"  {label}: {f.get('name')} HP={f.get('hp', 0):g}/{f.get('max_hp', 0):g} "
            f"pos=({f.get('x', 0):.0f},{f.get('y', 0):.0f}) intent={f.get('intent')}")


def render_replay(
    path: str | Path,
    from_time: float | None = None,
    to_time: float | None = None,
    compact: bool = False,
) -> None:
    """Render a JSONL replay file to stdout."""
    for rec in load_replay(path):
        rtype = rec.get("type", "")
        t = rec.get("time", rec.get("battle_time"))

        # Meta, start and end records are always shown
        if t is not None and rtype in ("event", "tick"):
            if from_time is not None and t < from_time:
                continue
            if to_time is not None and t > to_time:
                continue

        if rtype == "meta":
            print(f"=== REPLAY: seed={rec.get('seed')} ===")
            names = rec.get("fighters", [])
            if names:
                print(f"  {names[0]} vs {names[1]}")

        elif rtype == "battle_start":
            arena = rec.get("arena", [])
            if arena:
                print(f"  Arena: {arena[0]:g}x{arena[1]:g}  "
                      f"Time limit: {rec.get('max_battle_time'):g}s")
            if not compact:
                print(_fighter_line("Player", rec.get("player", {})))
                print(_fighter_line("Enemy ", rec.get("enemy", {})))

        elif rtype == "event":
            print(f"  [{t:7.2f}s] {rec.get('message')}")

        elif rtype == "tick":
            if compact:
                continue
            print(f"  --- tick {rec.get('tick')} @ {t:.2f}s ---")
            print(_fighter_line("Player", rec.get("player", {})))
            print(_fighter_line("Enemy ", rec.get("enemy", {})))

        elif rtype == "battle_end":
            print("\n=== BATTLE END ===")
            print(f"  Winner: {rec.get('winner')} (reason: {rec.get('reason')})")
            p, e = rec.get("player", {}), rec.get("enemy", {})
            print(f"  Final HP: {p.get('name')}={p.get('hp_remaining'):g} "
                  f"{e.get('name')}={e.get('hp_remaining'):g}")
            print(f"  Time: {t:.2f}s")
