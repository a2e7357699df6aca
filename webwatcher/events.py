"""
Mutation event model shared by the observer and the formatter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class MutationKind(Enum):
    """The five filesystem mutations reported in the audit trail."""

    CREATED = "add"
    MODIFIED = "change"
    REMOVED = "unlink"
    DIRECTORY_CREATED = "addDir"
    DIRECTORY_REMOVED = "unlinkDir"

    @property
    def label(self) -> str:
        return self.value.upper()

    @property
    def is_directory(self) -> bool:
        return self in (MutationKind.DIRECTORY_CREATED, MutationKind.DIRECTORY_REMOVED)

    @property
    def needs_settling(self) -> bool:
        """Content additions are only reported once the write has finished."""
        return self in (MutationKind.CREATED, MutationKind.MODIFIED)


@dataclass(frozen=True)
class MutationEvent:
    """A single filesystem change under the watched root."""

    kind: MutationKind
    path: str


def label_width(kinds: Iterable[MutationKind] = MutationKind) -> int:
    """
    Width of the kind column: the length of the longest label.

    Args:
        kinds: The kinds that can appear in one run.

    Returns:
        int: Number of characters every kind label is padded to.
    """
    return max(len(kind.label) for kind in kinds)


LABEL_WIDTH = label_width()
