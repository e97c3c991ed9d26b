"""Splice Organizer package

This package contains the filename classifier, the copy engine and the
command‑line interface for sorting a Splice samples folder into
``Drums/`` and ``Other/`` category folders.

Public classes are re‑exported here for convenience, so callers may
write ``from splice_organizer import organize`` without needing to know
the internal layout.
"""

from .classifier import Classifier, is_audio_file  # noqa: F401
from .engine import (  # noqa: F401
    OrganizerError,
    SampleOrganizerEngine,
    SourceFolderMissingError,
    organize,
)
from .rules import Category, ClassificationRule  # noqa: F401
from .state import ProcessedNameSet  # noqa: F401

__all__ = [
    "Category",
    "ClassificationRule",
    "Classifier",
    "is_audio_file",
    "OrganizerError",
    "ProcessedNameSet",
    "SampleOrganizerEngine",
    "SourceFolderMissingError",
    "organize",
]
