"""Core engine for the Splice organizer.

The :class:`SampleOrganizerEngine` walks a source folder depth first,
keeps only audio files (WAV/MP3), classifies each one by filename and
copies it into a categorized destination tree::

    <destination>/Drums/808
    <destination>/Drums/Snare
    ...
    <destination>/Other/Other

Design notes / safety defaults:
- Files are copied, never moved; the source tree is left untouched.
- A destination file that was not placed by the current run is treated as
  stale and replaced.
- A second file with the same name in the same run is copied to
  ``<destination>/<stem>_<n><ext>`` using the first free index.  When no
  index is free the file is dropped without an error.
- Filesystem errors for a single file or a single directory listing are
  reported and the walk carries on; only a missing source folder stops a
  run (:class:`SourceFolderMissingError`).

This engine is UI-agnostic and depends only on
:class:`splice_organizer.classifier.Classifier` and
:class:`splice_organizer.state.ProcessedNameSet`.
"""

from __future__ import annotations

import datetime
import shutil
import sys
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, TypedDict, Union

from . import rules
from .classifier import Classifier, is_audio_file
from .state import ProcessedNameSet


ACTION_COPIED = "COPIED"
ACTION_OVERWRITTEN = "OVERWRITTEN"
ACTION_INDEXED = "INDEXED"
ACTION_DROPPED = "DROPPED"
ACTION_FAILED = "FAILED"


class FileEntry(TypedDict, total=False):
    source: str
    dest: Optional[str]
    category: str
    action: str
    reason: str


class RunReport(TypedDict, total=False):
    run_id: str
    timestamp: str
    source: str
    destination: str
    verbose: bool
    files_processed: int
    files_copied: int
    files_overwritten: int
    files_indexed: int
    files_dropped: int
    failed: int
    files_skipped_non_audio: int
    directory_errors: int
    counts: Dict[str, int]
    files: List[FileEntry]
    errors: List[str]


class OrganizerError(Exception):
    """Base class for errors that abort an organizer run."""


class SourceFolderMissingError(OrganizerError):
    """Raised before any traversal when the source folder does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source folder does not exist: {path}")
        self.path = path


@dataclass(frozen=True)
class FileTask:
    source: Path
    destination_root: Path


@dataclass
class DirectoryListing:
    """Entries of one directory, or the error that prevented listing it."""

    path: Path
    entries: List[Path] = field(default_factory=list)
    error: Optional[OSError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SampleOrganizerEngine:
    """Copy audio samples from a source tree into category folders."""

    source_dir: Path
    destination_dir: Path
    verbose: bool = False
    classifier: Classifier = field(default_factory=Classifier)
    processed_names: ProcessedNameSet = field(default_factory=ProcessedNameSet)
    index_limit: int = rules.INDEX_SEARCH_LIMIT
    log_callback: Optional[Callable[[str], None]] = None
    log_to_console: bool = True

    def __post_init__(self) -> None:
        self.source_dir = Path(self.source_dir)
        self.destination_dir = Path(self.destination_dir)

    # ------------------------------------------------------------------
    # Console output
    def _emit_log(self, msg: str) -> None:
        if self.log_to_console:
            print(msg)
        if self.log_callback is not None:
            try:
                self.log_callback(msg)
            except Exception:
                pass

    def _emit_error(self, msg: str, report: RunReport) -> None:
        report["errors"].append(msg)
        print(msg, file=sys.stderr)
        if self.log_callback is not None:
            try:
                self.log_callback(msg)
            except Exception:
                pass

    # ------------------------------------------------------------------
    # Destination layout
    def category_dir(self, category: rules.Category, root: Optional[Path] = None) -> Path:
        base = self.destination_dir if root is None else root
        return base / category.group / category.subgroup

    def _ensure_category_tree(self, report: RunReport) -> None:
        """Create the fixed category folders up front (copies also create on demand)."""
        for category in rules.CATEGORIES:
            try:
                self.category_dir(category).mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                self._emit_error(f"Error creating folder {self.category_dir(category)}: {exc}", report)

    # ------------------------------------------------------------------
    # Traversal
    def _list_directory(self, directory: Path) -> DirectoryListing:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            return DirectoryListing(directory, error=exc)
        return DirectoryListing(directory, entries=entries)

    def _is_destination(self, path: Path) -> bool:
        try:
            return path.resolve() == self.destination_dir.resolve()
        except OSError:
            return False

    def _report_directory_error(self, directory: Path, error: Optional[OSError], report: RunReport) -> None:
        report["directory_errors"] += 1
        self._emit_error(f"Error processing directory {directory}: {error}", report)

    def _process_directory(self, directory: Path, report: RunReport) -> None:
        listing = self._list_directory(directory)
        if not listing.ok:
            self._report_directory_error(directory, listing.error, report)
            return

        for entry in listing.entries:
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                # Entries after this one are abandoned along with it.
                self._report_directory_error(directory, exc, report)
                return
            if is_dir:
                if self._is_destination(entry):
                    # Destination nested inside the source: never re-read our own output.
                    continue
                self._process_directory(entry, report)
            elif is_file:
                self._organize_file(FileTask(entry, self.destination_dir), report)

    # ------------------------------------------------------------------
    # Per-file placement
    def _find_indexed_path(self, filename: str, root: Path) -> Optional[Path]:
        """Return the first free ``<stem>_<n><ext>`` directly under ``root``."""
        name = Path(filename)
        for index in range(self.index_limit):
            candidate = root / f"{name.stem}_{index}{name.suffix}"
            if not candidate.exists():
                return candidate
        return None

    def _copy(self, src: Path, dst: Path) -> None:
        shutil.copy2(str(src), str(dst))
        if self.verbose:
            self._emit_log(f"Copied:\n  From: {src}\n  To:   {dst}")

    def _place_file(self, task: FileTask, dest_path: Path) -> Tuple[str, Optional[Path]]:
        """Copy one file, resolving collisions.  Returns (action, final path)."""
        source = task.source
        if not dest_path.exists():
            self._copy(source, dest_path)
            self.processed_names.add(source.name)
            return ACTION_COPIED, dest_path

        if dest_path.name not in self.processed_names:
            # Left over from an earlier run or put there by hand.
            dest_path.unlink()
            self._copy(source, dest_path)
            self.processed_names.add(source.name)
            return ACTION_OVERWRITTEN, dest_path

        indexed_path = self._find_indexed_path(source.name, task.destination_root)
        if indexed_path is None:
            return ACTION_DROPPED, None
        self._copy(source, indexed_path)
        return ACTION_INDEXED, indexed_path

    def _organize_file(self, task: FileTask, report: RunReport) -> None:
        source = task.source
        if not is_audio_file(source):
            report["files_skipped_non_audio"] += 1
            return

        category = self.classifier.classify(source.name)
        dest_path = self.category_dir(category, task.destination_root) / source.name
        reason = self.classifier.explain(source.name)
        report["files_processed"] += 1

        final_path: Optional[Path] = dest_path
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            if self.verbose:
                self._emit_log(f"Request:\n  Source:      {source}\n  Destination: {dest_path}")
            action, final_path = self._place_file(task, dest_path)
        except OSError as exc:
            action = ACTION_FAILED
            report["failed"] += 1
            reason += f"; copy failed: {exc}"
            self._emit_error(f"Error copying file {source}: {exc}", report)

        if action == ACTION_COPIED:
            report["files_copied"] += 1
        elif action == ACTION_OVERWRITTEN:
            report["files_overwritten"] += 1
        elif action == ACTION_INDEXED:
            report["files_indexed"] += 1
            reason += "; name already placed this run"
        elif action == ACTION_DROPPED:
            report["files_dropped"] += 1
            reason += "; no free index for duplicate name"

        if action in {ACTION_COPIED, ACTION_OVERWRITTEN, ACTION_INDEXED}:
            key = category.relative_path
            report["counts"][key] = report["counts"].get(key, 0) + 1

        report["files"].append(
            {
                "source": str(source),
                "dest": str(final_path) if final_path is not None else None,
                "category": category.relative_path,
                "action": action,
                "reason": reason,
            }
        )

    # ------------------------------------------------------------------
    def run(self) -> RunReport:
        """Organize the whole source tree and return a report dict.

        Raises :class:`SourceFolderMissingError` before creating anything
        when the source folder is missing.  Every other filesystem problem
        is recorded in the report and the run continues.
        """
        if not self.source_dir.exists():
            raise SourceFolderMissingError(self.source_dir)

        self.processed_names.clear()
        run_id = datetime.datetime.now().strftime("%Y%m%d_%H%M%S_") + uuid.uuid4().hex[:8]
        report: RunReport = {
            "run_id": run_id,
            "timestamp": datetime.datetime.now().isoformat(),
            "source": str(self.source_dir),
            "destination": str(self.destination_dir),
            "verbose": self.verbose,
            "files_processed": 0,
            "files_copied": 0,
            "files_overwritten": 0,
            "files_indexed": 0,
            "files_dropped": 0,
            "failed": 0,
            "files_skipped_non_audio": 0,
            "directory_errors": 0,
            "counts": {},
            "files": [],
            "errors": [],
        }

        self._emit_log(f"Splice Organizer run_id={run_id}")
        self._emit_log(f"Source: {self.source_dir}")
        self._emit_log(f"Destination: {self.destination_dir}")

        self._ensure_category_tree(report)
        self._process_directory(self.source_dir, report)

        self._emit_log(
            f"Done. processed={report['files_processed']} "
            f"copied={report['files_copied']} overwritten={report['files_overwritten']} "
            f"indexed={report['files_indexed']} dropped={report['files_dropped']} "
            f"failed={report['failed']} skipped_non_audio={report['files_skipped_non_audio']}"
        )
        return report


def organize(
    source_root: Union[str, Path],
    destination_root: Union[str, Path],
    verbose: bool = False,
    **engine_options: Any,
) -> RunReport:
    """Organize ``source_root`` into ``destination_root`` with a fresh name set."""
    engine = SampleOrganizerEngine(
        source_dir=Path(source_root),
        destination_dir=Path(destination_root),
        verbose=verbose,
        **engine_options,
    )
    return engine.run()
