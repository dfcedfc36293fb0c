"""Lightweight CLI helpers for inspecting stored interview sessions."""
from __future__ import annotations

import argparse
import sqlite3
from typing import List, Optional

from config.settings import settings
from services.scoring import category_averages
from services.sessions import default_store, load_context, load_summary


def tail_sessions(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, key
            FROM session_blobs
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for updated_at, key in cursor.fetchall():
            print(f"[{updated_at}] {key}")
    finally:
        conn.close()


def show_summary(session_id: str) -> int:
    store = default_store()
    context = load_context(store, session_id)
    snapshot = load_summary(store, session_id)
    if context is not None:
        print(f"{context.job_role} @ {context.company} ({context.language}, {context.modality})")
    if snapshot is None:
        print(f"No summary stored for session {session_id}")
        return 1
    score = "n/a" if snapshot.aggregate_score is None else f"{snapshot.aggregate_score:.1f}"
    print(f"turns={len(snapshot.turns)} aggregate_score={score}")
    for name, value in category_averages(snapshot.turns).items():
        print(f"  {name}: {value}")
    for index, turn in enumerate(snapshot.turns, start=1):
        print(f"{index}. Q: {turn.question}")
        print(f"   A: {turn.answer}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail", type=int, help="Show the most recently written session keys")
    parser.add_argument("--summary", help="Print the stored interview summary for a session id")
    args = parser.parse_args(argv)

    if args.tail:
        default_store()
        tail_sessions(args.tail)
    if args.summary:
        return show_summary(args.summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
