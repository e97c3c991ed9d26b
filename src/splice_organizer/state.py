from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Set


@dataclass(slots=True)
class ProcessedNameSet:
    """Lowercase basenames placed in the destination tree during one run.

    Only names of files that were actually copied are recorded.  The set
    starts empty for every run and is never filled from what already sits
    on disk, which is how a stale file from an earlier run is told apart
    from a same-run name collision.
    """

    names: Set[str] = field(default_factory=set)

    def add(self, filename: str) -> None:
        self.names.add(filename.lower())

    def clear(self) -> None:
        self.names.clear()

    def __contains__(self, filename: object) -> bool:
        if not isinstance(filename, str):
            return False
        return filename.lower() in self.names

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.names))
