# src/splice_organizer/__main__.py
from __future__ import annotations


def main() -> int:
    """
    Module entrypoint:
      - python -m splice_organizer                     -> interactive prompts
      - python -m splice_organizer organize SRC DEST   -> CLI execution
      - python -m splice_organizer classify NAME...    -> CLI execution
    """
    from splice_organizer.cli import main as cli_main

    # Let the CLI parse sys.argv itself.
    return int(cli_main())


if __name__ == "__main__":
    raise SystemExit(main())
