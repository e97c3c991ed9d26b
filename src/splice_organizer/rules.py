"""Centralized classification data for the Splice organizer.

Categories, keyword rules, the audio allow-list and the collision index
limit are defined here and referenced by the classifier and the engine
(single source of truth).  Rule order is significant: the first rule
whose keywords match a filename wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class Category:
    """A fixed (group, subgroup) destination folder pair."""

    group: str
    subgroup: str

    @property
    def relative_path(self) -> str:
        return f"{self.group}/{self.subgroup}"

    def __str__(self) -> str:
        return self.relative_path


@dataclass(frozen=True)
class ClassificationRule:
    """Route a filename to ``category`` when it contains any keyword."""

    category: Category
    keywords: FrozenSet[str]

    def matches(self, lower_name: str) -> bool:
        return any(keyword in lower_name for keyword in self.keywords)


DRUMS_808 = Category("Drums", "808")
DRUMS_SNARE = Category("Drums", "Snare")
DRUMS_KICK = Category("Drums", "Kick")
DRUMS_CLAP = Category("Drums", "Clap")
DRUMS_HAT = Category("Drums", "Hat")
DRUMS_OTHER = Category("Drums", "Other")
OTHER_LOOP = Category("Other", "Loop")
OTHER_OTHER = Category("Other", "Other")

CATEGORIES: Tuple[Category, ...] = (
    DRUMS_808,
    DRUMS_SNARE,
    DRUMS_KICK,
    DRUMS_CLAP,
    DRUMS_HAT,
    DRUMS_OTHER,
    OTHER_LOOP,
    OTHER_OTHER,
)

# Evaluated top to bottom; keep "808" ahead of everything else.
DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(DRUMS_808, frozenset({"808"})),
    ClassificationRule(DRUMS_SNARE, frozenset({"snare", "_snr", "snr_"})),
    ClassificationRule(DRUMS_KICK, frozenset({"kick", "_kck", "kck_"})),
    ClassificationRule(DRUMS_CLAP, frozenset({"clap", "_clp", "clp_"})),
    ClassificationRule(DRUMS_HAT, frozenset({"hat", "ht_", "_ht"})),
    ClassificationRule(DRUMS_OTHER, frozenset({"drum", "_drm", "drm_"})),
    ClassificationRule(OTHER_LOOP, frozenset({"loop"})),
)

FALLBACK_CATEGORY = OTHER_OTHER

AUDIO_EXTENSIONS: FrozenSet[str] = frozenset({".wav", ".mp3"})

# Indexed copies use suffixes 0 .. INDEX_SEARCH_LIMIT - 1.
INDEX_SEARCH_LIMIT = 999_999
