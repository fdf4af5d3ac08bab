"""
hanzicards: vocabulary flashcards
---------------------------------

Command line entry point for managing the card store and running a review.

    python review_deck.py add 学习 "to study" --pinyin xuéxí --pos verb
    python review_deck.py review --due-only
    python review_deck.py export data/export/vocab_export.csv
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from hanzicards.config import DEMO_WORDS, Config, SettingsManager
from hanzicards.deck import DeckFilters, ReviewDirection, ReviewSession
from hanzicards.models import Grade
from hanzicards.services import StorageBackend, VocabularyService
from hanzicards.utils import human_date, setup_logger

GRADE_KEYS = {"1": Grade.AGAIN, "2": Grade.GOOD, "3": Grade.EASY}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hanzicards", description="Vocabulary flashcards")
    parser.add_argument("--store", help="Card store file (overrides settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_filters(p: argparse.ArgumentParser) -> None:
        p.add_argument("--query", default="", help="Search hanzi, pinyin and meaning")
        p.add_argument("--pos", default="", help="Part of speech")
        p.add_argument("--chapter", default="", help="Chapter tag")

    p_list = sub.add_parser("list", help="Show cards as a table")
    add_filters(p_list)
    p_list.add_argument("--sort", choices=["recent", "hanzi", "priority"], default=None)

    p_add = sub.add_parser("add", help="Add or edit a card")
    p_add.add_argument("hanzi")
    p_add.add_argument("meaning")
    p_add.add_argument("--id", default=None, help="Edit the card with this id")
    p_add.add_argument("--pinyin", default="")
    p_add.add_argument("--pos", default="")
    p_add.add_argument("--example", default="")
    p_add.add_argument("--chapter", default="")

    p_del = sub.add_parser("delete", help="Delete a card")
    p_del.add_argument("id")

    p_due = sub.add_parser("due-today", help="Make a card due now")
    p_due.add_argument("id")

    p_import = sub.add_parser("import", help="Merge a JSON or CSV export")
    p_import.add_argument("path")

    p_export = sub.add_parser("export", help="Export to .json or .csv")
    p_export.add_argument("path")

    sub.add_parser("stats", help="Show store statistics")

    p_review = sub.add_parser("review", help="Review flashcards")
    add_filters(p_review)
    p_review.add_argument("--due-only", action="store_true", default=None)
    p_review.add_argument("--all", dest="due_only", action="store_false", default=None)
    p_review.add_argument("--reverse", action="store_true", help="Show meaning first")

    return parser


def _print_table(service: VocabularyService, filters: DeckFilters, sort_by: str) -> None:
    rows = service.list_cards(filters, sort_by)
    print(f"{len(rows)} cards")
    for card in rows:
        print(
            f"{card.hanzi}\t{card.pinyin}\t{card.meaning}\t{card.part_of_speech}"
            f"\t{human_date(card.due)}\t{card.id}"
        )


def _run_review(session: ReviewSession) -> None:
    if session.is_empty:
        print("No cards to review.")
        return

    print("[enter] flip  [n]ext  [p]revious  [1] again  [2] good  [3] easy  [q]uit")
    while True:
        print(f"\n({session.position}/{session.total})  {session.front_text()}")
        if session.showing_back:
            for name, value in session.back_fields().items():
                print(f"  {name}: {value}")
            labels = session.grade_labels()
            print("  " + "  ".join(
                f"[{key}] {grade.value} {labels[grade]}" for key, grade in GRADE_KEYS.items()
            ))

        try:
            key = input("> ").strip().lower()
        except EOFError:
            return

        if key in ("", " "):
            session.flip()
        elif key == "n":
            session.next()
        elif key == "p":
            session.previous()
        elif key in GRADE_KEYS:
            session.grade(GRADE_KEYS[key])
        elif key == "q":
            return


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = _build_parser().parse_args(argv)
    settings = SettingsManager()
    setup_logger(level=settings.get("LOG_LEVEL"))

    backend = StorageBackend(settings.get("STORAGE_BACKEND", "json"))
    store_path = args.store or settings.get("STORE_FILE")
    if not args.store and backend is StorageBackend.CSV and store_path == Config.STORE_FILE:
        store_path = str(Path(store_path).with_suffix(".csv"))
    service = VocabularyService(backend=backend, store_path=store_path)
    service.load()
    if settings.get("SEED_DEMO_WORDS", True):
        service.seed_if_empty(DEMO_WORDS)

    if args.command == "list":
        filters = DeckFilters(args.query, args.pos, args.chapter)
        _print_table(service, filters, args.sort or settings.get("SORT_BY", "recent"))

    elif args.command == "add":
        try:
            card = service.upsert({
                "id": args.id,
                "hanzi": args.hanzi,
                "meaning": args.meaning,
                "pinyin": args.pinyin,
                "partOfSpeech": args.pos,
                "example": args.example,
                "chapter": args.chapter,
            })
        except ValueError as e:
            print(f"[ERROR] {e}")
            return 1
        print(f"Saved {card.hanzi} ({card.id})")

    elif args.command == "delete":
        if not service.delete(args.id):
            print(f"[ERROR] No card with id {args.id}")
            return 1

    elif args.command == "due-today":
        if not service.reset_due(args.id):
            print(f"[ERROR] No card with id {args.id}")
            return 1

    elif args.command == "import":
        changed = service.import_file(args.path)
        print(f"Imported {changed} cards")

    elif args.command == "export":
        if args.path.lower().endswith(".json"):
            path = service.export_json(args.path)
        else:
            path = service.export_csv(args.path)
        print(f"Exported {service.count} cards to {path}")

    elif args.command == "stats":
        for key, value in service.get_statistics().items():
            print(f"{key}: {value}")

    elif args.command == "review":
        due_only = args.due_only if args.due_only is not None else settings.get("DUE_ONLY", True)
        direction = (
            ReviewDirection.MEANING_TO_HANZI if args.reverse
            else settings.get("REVIEW_DIRECTION", ReviewDirection.HANZI_TO_MEANING.value)
        )
        session = ReviewSession(service, direction=direction)
        session.build_deck(DeckFilters(args.query, args.pos, args.chapter), due_only=due_only)
        _run_review(session)

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
