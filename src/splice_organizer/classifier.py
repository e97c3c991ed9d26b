"""Filename classification for the Splice organizer.

The :class:`Classifier` maps a sample filename to one of the fixed
destination categories defined in :mod:`splice_organizer.rules`.  The
filename is lowercased once and checked against each rule's keywords in
order; the first rule with a matching keyword decides the category.
Filenames that match no rule fall back to ``Other/Other``.

Example::

    >>> Classifier().classify("808_snare_hit.wav").relative_path
    'Drums/808'

Classification looks at the whole filename, extension included, and
never touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional, Sequence, Union

from .rules import (
    AUDIO_EXTENSIONS,
    DEFAULT_RULES,
    FALLBACK_CATEGORY,
    Category,
    ClassificationRule,
)


def is_audio_file(path: Union[str, Path], extensions: FrozenSet[str] = AUDIO_EXTENSIONS) -> bool:
    """Return ``True`` when the file extension is on the audio allow-list.

    The comparison is case insensitive, so ``KICK.WAV`` qualifies.
    """
    return Path(path).suffix.lower() in extensions


@dataclass(frozen=True)
class Classifier:
    """Route filenames to categories using ordered keyword rules."""

    rules: Sequence[ClassificationRule] = DEFAULT_RULES
    fallback: Category = FALLBACK_CATEGORY

    def match(self, filename: str) -> Optional[ClassificationRule]:
        """Return the first rule matching ``filename``, or ``None``."""
        lower_name = filename.lower()
        for rule in self.rules:
            if rule.matches(lower_name):
                return rule
        return None

    def classify(self, filename: str) -> Category:
        rule = self.match(filename)
        if rule is None:
            return self.fallback
        return rule.category

    def explain(self, filename: str) -> str:
        """Return a short human readable reason for the chosen category."""
        rule = self.match(filename)
        if rule is None:
            return "no keyword matched; fallback category"
        lower_name = filename.lower()
        hits = sorted(k for k in rule.keywords if k in lower_name)
        return "matched " + ", ".join(repr(k) for k in hits)
