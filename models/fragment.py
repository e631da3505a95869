"""Partial Info.plist fragments and their merge priority.

Fragments reach the scratch directory from two places: the resource
compilers (``actool`` / ``ibtool`` ``--output-partial-info-plist``) and the
dependency archives scanned by :mod:`collectors.archive`.  A fragment's
priority is an explicit :class:`FragmentKind`; :meth:`Fragment.classify` is
the only place where that kind is derived from a file name.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel

# Suffix given to every fragment written into the scratch directory.
FRAGMENT_SUFFIX = "_Partial.plist"

# Owner name of the application's own code archive; any fragment whose name
# ends with CLASSES_FRAGMENT merges last.
CLASSES_OWNER = "classes"
CLASSES_FRAGMENT = CLASSES_OWNER + FRAGMENT_SUFFIX

# Well-known fragment location inside a dependency archive.
ARCHIVE_FRAGMENT_PATH = "META-INF/substrate/ios/Partial-Info.plist"


class FragmentKind(str, Enum):
    ORDINARY         = "ordinary"
    CODE_CONTRIBUTED = "code_contributed"


# Lower merges first.
_KIND_PRIORITY: dict[FragmentKind, int] = {
    FragmentKind.ORDINARY: 0,
    FragmentKind.CODE_CONTRIBUTED: 1,
}


class Fragment(BaseModel):
    """A partial manifest on disk, tagged with its merge priority."""

    path: Path
    """Location of the fragment inside the scratch directory."""

    kind: FragmentKind = FragmentKind.ORDINARY
    """Code-contributed fragments merge after every ordinary fragment."""

    source: str = ""
    """Where the fragment came from: an archive path or a compiler name."""

    @classmethod
    def classify(cls, path: Path, source: str = "") -> "Fragment":
        """Tag a fragment found on disk from its file name alone."""
        kind = (
            FragmentKind.CODE_CONTRIBUTED
            if path.name.endswith(CLASSES_FRAGMENT)
            else FragmentKind.ORDINARY
        )
        return cls(path=path, kind=kind, source=source)

    def sort_key(self) -> tuple[int, str]:
        """Strict total order: priority first, then the path string."""
        return (_KIND_PRIORITY[self.kind], str(self.path))


def fragment_name(owner: str) -> str:
    """Scratch-directory file name for a fragment owned by *owner*."""
    return owner + FRAGMENT_SUFFIX
