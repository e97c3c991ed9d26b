"""
Test suite for the copy engine.

Covers:
1. Placement by category and byte-exact copies
2. Audio filter (non-audio files never copied)
3. Same-run name collisions (indexed copies under the destination root)
4. Stale destination files (overwritten, not indexed)
5. Index exhaustion (silent drop)
6. Recovery from per-file copy errors and directory listing errors
7. Missing source folder precondition

Run with: pytest tests/test_engine.py -v
"""

import shutil
from pathlib import Path

import sys
import pytest

# Add the src directory to sys.path so that splice_organizer can be imported
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from splice_organizer import engine as engine_module
from splice_organizer.engine import (
    DirectoryListing,
    SampleOrganizerEngine,
    SourceFolderMissingError,
    organize,
)
from splice_organizer.rules import CATEGORIES
from splice_organizer.state import ProcessedNameSet


def write_sample(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def relative_files(root: Path) -> set:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def source(tmp_path: Path) -> Path:
    src = tmp_path / "Splice" / "Samples"
    src.mkdir(parents=True)
    return src


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    return tmp_path / "Organized"


# ============================================================================
# PLACEMENT
# ============================================================================

def test_single_file_round_trip(source: Path, destination: Path):
    """A uniquely named file is copied byte for byte to its category folder."""
    payload = b"RIFF\x00\x01fake-wave-data\xff"
    original = write_sample(source / "packs" / "kick_01.wav", payload)

    report = organize(source, destination)

    placed = destination / "Drums" / "Kick" / "kick_01.wav"
    assert placed.read_bytes() == payload
    # source is copied, not moved
    assert original.read_bytes() == payload
    assert report["files_copied"] == 1
    assert report["files"][0]["action"] == "COPIED"
    assert report["counts"] == {"Drums/Kick": 1}


def test_category_folders_created_up_front(source: Path, destination: Path):
    organize(source, destination)
    for category in CATEGORIES:
        assert (destination / category.group / category.subgroup).is_dir()


def test_files_routed_by_keyword(source: Path, destination: Path):
    write_sample(source / "a" / "808_snare_hit.wav", b"808")
    write_sample(source / "a" / "KICK_01.WAV", b"kick")
    write_sample(source / "b" / "ambient_loop.wav", b"loop")
    write_sample(source / "b" / "texture_swoosh.mp3", b"fx")

    organize(source, destination)

    assert relative_files(destination) == {
        "Drums/808/808_snare_hit.wav",
        "Drums/Kick/KICK_01.WAV",
        "Other/Loop/ambient_loop.wav",
        "Other/Other/texture_swoosh.mp3",
    }


def test_non_audio_files_are_skipped(source: Path, destination: Path):
    write_sample(source / "kick.txt", b"notes")
    write_sample(source / "kick.mp3", b"mp3")
    write_sample(source / "cover.png", b"png")

    report = organize(source, destination)

    assert relative_files(destination) == {"Drums/Kick/kick.mp3"}
    assert report["files_skipped_non_audio"] == 2
    assert report["files_processed"] == 1
    assert report["errors"] == []


# ============================================================================
# COLLISIONS
# ============================================================================

def test_same_run_collision_goes_to_root_with_index(source: Path, destination: Path):
    write_sample(source / "a" / "snare_1.wav", b"first")
    write_sample(source / "b" / "snare_1.wav", b"second")
    write_sample(source / "c" / "snare_1.wav", b"third")

    report = organize(source, destination)

    assert (destination / "Drums" / "Snare" / "snare_1.wav").read_bytes() == b"first"
    assert (destination / "snare_1_0.wav").read_bytes() == b"second"
    assert (destination / "snare_1_1.wav").read_bytes() == b"third"
    assert report["files_copied"] == 1
    assert report["files_indexed"] == 2
    assert [f["action"] for f in report["files"]] == ["COPIED", "INDEXED", "INDEXED"]


def test_indexed_name_skips_existing_root_files(source: Path, destination: Path):
    write_sample(destination / "snare_1_0.wav", b"keep me")
    write_sample(source / "a" / "snare_1.wav", b"first")
    write_sample(source / "b" / "snare_1.wav", b"second")

    organize(source, destination)

    assert (destination / "snare_1_0.wav").read_bytes() == b"keep me"
    assert (destination / "snare_1_1.wav").read_bytes() == b"second"


def test_stale_destination_file_is_overwritten(source: Path, destination: Path):
    stale = write_sample(destination / "Drums" / "Kick" / "kick.wav", b"old run")
    write_sample(source / "kick.wav", b"new run")

    report = organize(source, destination)

    assert stale.read_bytes() == b"new run"
    assert report["files_overwritten"] == 1
    assert report["files_indexed"] == 0
    assert not (destination / "kick_0.wav").exists()


def test_second_run_overwrites_instead_of_indexing(source: Path, destination: Path):
    write_sample(source / "a" / "clap.wav", b"a")
    write_sample(source / "b" / "clap.wav", b"b")

    first = organize(source, destination)
    second = organize(source, destination)

    assert first["files_copied"] == 1 and first["files_indexed"] == 1
    # the name set starts empty again, so the category copy is replaced
    assert second["files_overwritten"] == 1
    assert second["files_indexed"] == 1
    assert (destination / "Drums" / "Clap" / "clap.wav").read_bytes() == b"a"
    assert (destination / "clap_0.wav").read_bytes() == b"b"
    assert (destination / "clap_1.wav").read_bytes() == b"b"


def test_index_exhaustion_drops_file_silently(source: Path, destination: Path, capsys):
    write_sample(destination / "hat_0.wav", b"x")
    write_sample(destination / "hat_1.wav", b"y")
    write_sample(source / "a" / "hat.wav", b"first")
    write_sample(source / "b" / "hat.wav", b"second")

    engine = SampleOrganizerEngine(source, destination, index_limit=2)
    report = engine.run()

    assert report["files_dropped"] == 1
    assert report["failed"] == 0
    assert report["errors"] == []
    assert report["files"][1]["dest"] is None
    assert capsys.readouterr().err == ""
    assert (destination / "hat_0.wav").read_bytes() == b"x"
    assert (destination / "hat_1.wav").read_bytes() == b"y"


# ============================================================================
# ERROR RECOVERY
# ============================================================================

def test_missing_source_aborts_before_creating_anything(tmp_path: Path, destination: Path):
    with pytest.raises(SourceFolderMissingError) as excinfo:
        organize(tmp_path / "nope", destination)
    assert excinfo.value.path == tmp_path / "nope"
    assert not destination.exists()


def test_copy_error_is_reported_and_walk_continues(source: Path, destination: Path, monkeypatch, capsys):
    write_sample(source / "kick.wav", b"kick")
    write_sample(source / "snare.wav", b"snare")
    real_copy2 = shutil.copy2

    def flaky_copy2(src, dst, *args, **kwargs):
        if Path(src).name == "kick.wav":
            raise PermissionError(13, "Permission denied", str(dst))
        return real_copy2(src, dst, *args, **kwargs)

    monkeypatch.setattr(engine_module.shutil, "copy2", flaky_copy2)
    names = ProcessedNameSet()
    report = SampleOrganizerEngine(source, destination, processed_names=names).run()

    assert report["failed"] == 1
    assert report["files_copied"] == 1
    assert (destination / "Drums" / "Snare" / "snare.wav").exists()
    assert not (destination / "Drums" / "Kick" / "kick.wav").exists()
    # only successfully copied names are recorded
    assert list(names) == ["snare.wav"]
    assert "Error copying file" in capsys.readouterr().err
    assert len(report["errors"]) == 1


def test_directory_listing_error_skips_only_that_subtree(source: Path, destination: Path, monkeypatch):
    write_sample(source / "locked" / "kick.wav", b"kick")
    write_sample(source / "open" / "snare.wav", b"snare")
    original = SampleOrganizerEngine._list_directory

    def flaky_list(self, directory):
        if directory.name == "locked":
            return DirectoryListing(directory, error=PermissionError(13, "Permission denied"))
        return original(self, directory)

    monkeypatch.setattr(SampleOrganizerEngine, "_list_directory", flaky_list)
    report = organize(source, destination)

    assert report["directory_errors"] == 1
    assert relative_files(destination) == {"Drums/Snare/snare.wav"}


def test_entry_stat_error_abandons_rest_of_directory_only(source: Path, destination: Path, monkeypatch, capsys):
    """A directory that can be listed but not entered stops there; siblings still run."""
    write_sample(source / "a_locked" / "clap.wav", b"clap")
    write_sample(source / "a_locked" / "kick.wav", b"kick")
    write_sample(source / "a_locked" / "z_hat.wav", b"hat")
    write_sample(source / "b_open" / "snare.wav", b"snare")
    real_is_dir = Path.is_dir

    def flaky_is_dir(self, *args, **kwargs):
        if self.parent.name == "a_locked" and self.name == "kick.wav":
            raise PermissionError(13, "Permission denied", str(self))
        return real_is_dir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "is_dir", flaky_is_dir)
    report = organize(source, destination)

    assert report["directory_errors"] == 1
    assert relative_files(destination) == {"Drums/Clap/clap.wav", "Drums/Snare/snare.wav"}
    assert "Permission denied" in capsys.readouterr().err
    assert len(report["errors"]) == 1


def test_source_that_is_a_file_reports_listing_error(tmp_path: Path, destination: Path):
    not_a_dir = write_sample(tmp_path / "kick.wav", b"kick")
    report = organize(not_a_dir, destination)
    assert report["directory_errors"] == 1
    assert report["files_processed"] == 0


# ============================================================================
# OUTPUT
# ============================================================================

def test_verbose_prints_request_and_confirmation(source: Path, destination: Path, capsys):
    write_sample(source / "kick.wav", b"kick")
    organize(source, destination, verbose=True)
    out = capsys.readouterr().out
    assert "Request:" in out
    assert "Copied:" in out
    assert str(destination / "Drums" / "Kick" / "kick.wav") in out


def test_quiet_run_prints_no_file_notices(source: Path, destination: Path, capsys):
    write_sample(source / "kick.wav", b"kick")
    organize(source, destination)
    out = capsys.readouterr().out
    assert "Request:" not in out
    assert "Done. processed=1" in out


def test_log_callback_receives_messages(source: Path, destination: Path, capsys):
    write_sample(source / "kick.wav", b"kick")
    messages = []
    organize(source, destination, log_callback=messages.append, log_to_console=False)
    assert messages[0].startswith("Splice Organizer run_id=")
    assert messages[-1].startswith("Done.")
    assert capsys.readouterr().out == ""


def test_failing_log_callback_does_not_break_run(source: Path, destination: Path):
    write_sample(source / "kick.wav", b"kick")

    def broken(msg):
        raise RuntimeError("ui went away")

    report = organize(source, destination, log_callback=broken, log_to_console=False)
    assert report["files_copied"] == 1


def test_destination_inside_source_is_not_rescanned(source: Path):
    write_sample(source / "kick.wav", b"kick")
    destination = source / "Organized"

    report = organize(source, destination)

    assert report["files_processed"] == 1
    assert relative_files(destination) == {"Drums/Kick/kick.wav"}
