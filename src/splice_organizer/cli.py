"""Command‑line interface for the Splice organizer.

Subcommands:

- ``organize SOURCE DEST``: copy audio samples into category folders.
- ``classify NAME ...``: show which category each filename would go to.

Run without a subcommand to be asked for the folders interactively.
Run ``python -m splice_organizer --help`` for usage.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .classifier import Classifier, is_audio_file
from .engine import SampleOrganizerEngine, SourceFolderMissingError

BANNER_RULE = "-" * 78


def _parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="splice-organizer",
        description="Splice Organizer – copy audio samples into Drums/ and Other/ category folders",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command")
    # organize
    sp = subparsers.add_parser("organize", help="Copy WAV/MP3 samples from SOURCE into categorized DEST")
    sp.add_argument("source", help="Path to the samples folder to scan")
    sp.add_argument("destination", help="Path to the organized output folder (created if missing)")
    sp.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print source and destination of every copied file",
    )
    sp.add_argument("--json", action="store_true", help="Print the run report as JSON")
    # classify
    sp = subparsers.add_parser("classify", help="Show the category chosen for each filename")
    sp.add_argument("names", nargs="+", help="Filenames to classify")
    sp.add_argument("--json", action="store_true", help="Print results as JSON")
    return parser.parse_args(argv)


def _run_organize(source: Path, destination: Path, verbose: bool, as_json: bool = False) -> int:
    engine = SampleOrganizerEngine(
        source_dir=source,
        destination_dir=destination,
        verbose=verbose,
        log_to_console=not as_json,
    )
    try:
        report = engine.run()
    except SourceFolderMissingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if as_json:
        print(json.dumps(report, indent=2))
    return 0


def _classify_names(names: List[str], as_json: bool) -> int:
    classifier = Classifier()
    results: List[Dict[str, Any]] = []
    for name in names:
        results.append(
            {
                "name": name,
                "category": classifier.classify(name).relative_path,
                "audio": is_audio_file(name),
                "reason": classifier.explain(name),
            }
        )
    if as_json:
        print(json.dumps(results, indent=2))
        return 0
    for item in results:
        suffix = "" if item["audio"] else "  (skipped: not a WAV/MP3 file)"
        print(f"{item['name']} -> {item['category']}{suffix}")
    return 0


def _ask(prompt: str) -> str:
    """Read a non-empty answer, asking again on a blank line."""
    while True:
        answer = input(prompt).strip()
        if answer:
            return answer


def _parse_yes_no(answer: str) -> bool:
    return answer.strip().lower() in {"1", "y", "yes", "true"}


def run_interactive() -> int:
    """Prompt for folders the way the original console tool did."""
    print(BANNER_RULE)
    print("Splice Organizer")
    print("Copies WAV/MP3 samples into Drums/ and Other/ category folders.")
    print()

    try:
        source = Path(_ask("Enter Splice Samples folder name: ")).expanduser()
        # Checked before asking anything else so nothing is created for a bad path.
        if not source.exists():
            print("Source folder does not exist. Exiting.")
            return 1

        destination = Path(_ask("Enter destination folder name: ")).expanduser()
        verbose = _parse_yes_no(_ask("Print the source and destination info: Enter 1 for YES, 0 for NO: "))
    except EOFError:
        print("\nNo input. Exiting.")
        return 1

    status = _run_organize(source, destination, verbose)
    if status != 0:
        return status
    print("Splice files organized successfully.")
    try:
        input("Press Enter to exit...")
    except EOFError:
        pass
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_arguments(argv)
    command = args.command
    if command is None:
        return run_interactive()
    if command == "classify":
        return _classify_names(args.names, args.json)
    source = Path(args.source).expanduser()
    destination = Path(args.destination).expanduser()
    return _run_organize(source, destination, args.verbose, args.json)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
