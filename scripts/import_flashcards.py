#!/usr/bin/env python3
"""Import a flashcard set for a user from a CSV file.

CSV schema (header required):
front,back

Usage:
    python scripts/import_flashcards.py data/spanish.csv --user-id 123456 --title "Spanish Basics"
"""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from studybot.db import add_flashcard_set, init_db
from studybot.flashcards import parse_flashcards_csv
from studybot.models import FlashcardSet


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("csv_path", type=Path, help="Path to a front,back CSV file")
    parser.add_argument("--user-id", type=int, required=True, help="Telegram user id that owns the set")
    parser.add_argument("--title", default=None, help="Set title (defaults to the file name)")
    args = parser.parse_args()

    cards = list(parse_flashcards_csv(args.csv_path))
    if not cards:
        raise SystemExit("No cards found in CSV")
    title = args.title or args.csv_path.stem.replace("_", " ").title()

    await init_db()
    await add_flashcard_set(args.user_id, FlashcardSet(title=title, cards=cards))
    print(f"Imported {len(cards)} cards into set “{title}” for user {args.user_id}.")


if __name__ == "__main__":
    asyncio.run(main())
