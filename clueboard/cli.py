"""
Clueboard CLI - Command-line interface for board files.

Usage:
    clueboard classify <file>          Draft or complete
    clueboard validate <file>          Check a file can be played
    clueboard show <file>              Print the parsed board
    clueboard export <file> [-o out]   Rewrite in canonical form
    clueboard serve                    Run the HTTP API
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Clueboard - Trivia board authoring and play engine",
        prog="clueboard",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("CLUEBOARD_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    classify_parser = subparsers.add_parser("classify", help="Classify a board file")
    classify_parser.add_argument("board_file", help="Path to board text file")

    validate_parser = subparsers.add_parser("validate", help="Check a file can be played")
    validate_parser.add_argument("board_file", help="Path to board text file")

    show_parser = subparsers.add_parser("show", help="Print the parsed board")
    show_parser.add_argument("board_file", help="Path to board text file")

    export_parser = subparsers.add_parser("export", help="Rewrite a file in canonical form")
    export_parser.add_argument("board_file", help="Path to board text file")
    export_parser.add_argument("--output", "-o", help="Output file (default: derived from title)")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "classify":
        return cmd_classify(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "show":
        return cmd_show(args)
    elif args.command == "export":
        return cmd_export(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)


def cmd_classify(args):
    """Print draft or complete."""
    from .board_format import classify_upload, route_upload

    text = _read(args.board_file)
    print(f"Kind: {classify_upload(text).value}")
    print(f"Opens as: {route_upload(text).value}")
    return 0


def cmd_validate(args):
    """Exit 1 with the rejection message if the file cannot be played."""
    from .board_format import validate_for_play

    verdict = validate_for_play(_read(args.board_file))
    if verdict.ok:
        print("OK: ready to play")
        return 0
    print(f"Rejected ({verdict.reason.value}): {verdict.message}")
    return 1


def cmd_show(args):
    """Print the parsed board, marking image clues."""
    from .board_format import assemble, extract, image_key

    raw = extract(_read(args.board_file))
    draft = assemble(raw)

    print(f"Title: {draft.title or '(none)'}")
    if raw.marker:
        print("Draft file")
    if raw.teams:
        print(f"Teams: {', '.join(raw.teams)}")
    for category in draft.categories:
        print(f"\n{category.name or '(unnamed)'} ({len(category.clues)} clues)")
        for clue in category.clues:
            question = clue.question
            if image_key(question) is not None:
                question = f"[image {image_key(question)}]"
            print(f"  {clue.value:>4}  {question}")
    return 0


def cmd_export(args):
    """Write canonical game text for playable files, draft text otherwise."""
    from .authoring import export_form
    from .board_format import (
        Team,
        assemble,
        assemble_strict,
        export_filename,
        extract,
        serialize_game,
        validate_for_play,
    )

    text = _read(args.board_file)
    if validate_for_play(text).ok:
        board = assemble_strict(extract(text))
        filename = export_filename(board.title, complete=True)
        content = serialize_game(board)
    else:
        raw = extract(text)
        teams = [Team(name=name) for name in raw.teams]
        exported = export_form(assemble(raw), teams, datetime.now(timezone.utc))
        filename, content = exported.filename, exported.content

    output = args.output or filename
    with open(output, "w", encoding="utf-8") as f:
        f.write(content)
    print(f"Wrote {output}")
    return 0


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("clueboard.api.app:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
