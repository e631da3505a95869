"""ContributionCollector — partial Info.plist files embedded in dependencies.

Libraries declare what they need from the final app (permissions, background
modes, URL schemes…) by shipping ``META-INF/substrate/ios/Partial-Info.plist``
inside their archive.  The collector copies each such entry into the scratch
directory as ``<archive stem>_Partial.plist`` so the merge order (sorted by
path) is reproducible.  When two archives share a stem, the later one is
written as ``<digest>_<stem>_Partial.plist``, the digest taken from its
resolved path, so neither overwrites the other.

The application's own ``classes.jar`` contributes a code-contributed fragment
that merges after every other fragment.
"""

import hashlib
import os
import shutil
import zipfile
from collections.abc import Iterable
from pathlib import Path

from app.utils.logging import get_logger
from models.errors import IoError
from models.fragment import (
    ARCHIVE_FRAGMENT_PATH,
    CLASSES_OWNER,
    Fragment,
    FragmentKind,
    fragment_name,
)

# Extensions of classpath entries opened as archives.
_ARCHIVE_EXTS: tuple[str, ...] = (".jar", ".zip")


def _path_digest(archive: Path) -> str:
    return hashlib.sha256(str(archive.resolve()).encode("utf-8")).hexdigest()[:8]


def archives_on_classpath(classpath: Iterable[Path | str] | str) -> list[Path]:
    """Return the existing archive files on *classpath*, in classpath order.

    *classpath* may be an ``os.pathsep``-joined string or an iterable of
    paths.  Directories, missing entries and non-archive files are skipped.
    """
    if isinstance(classpath, str):
        classpath = [p for p in classpath.split(os.pathsep) if p]
    return [
        Path(entry)
        for entry in classpath
        if Path(entry).is_file() and Path(entry).suffix.lower() in _ARCHIVE_EXTS
    ]


class ContributionCollector:
    """Extract archive-embedded fragments into the scratch directory.

    Usage::

        collector = ContributionCollector()
        fragments = collector.collect(config.classpath, paths.partial_plist_dir)
    """

    def __init__(self, entry_path: str = ARCHIVE_FRAGMENT_PATH) -> None:
        self.entry_path = entry_path
        self._log = get_logger("collectors.archive")

    def collect(
        self,
        classpath_archives: Iterable[Path | str] | str,
        scratch_dir: Path,
    ) -> list[Fragment]:
        """Copy the fragment of every archive that carries one.

        Returns:
            The fragments written, in classpath order.  Archives without the
            entry contribute nothing.

        Raises:
            IoError: If an archive cannot be opened or the copy fails; the
                message names the archive.
        """
        try:
            scratch_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoError(scratch_dir, f"cannot create scratch directory: {exc}") from exc

        self._log.debug("scanning_archives_for_plists", entry=self.entry_path)
        fragments: list[Fragment] = []
        owners: dict[str, Path] = {}
        for archive in archives_on_classpath(classpath_archives):
            name = fragment_name(archive.stem)
            if name in owners:
                name = fragment_name(f"{_path_digest(archive)}_{archive.stem}")
                self._log.debug(
                    "archive_stem_collision",
                    archive=str(archive),
                    other=str(owners[fragment_name(archive.stem)]),
                    target=name,
                )
            fragment = self._extract(archive, scratch_dir / name)
            if fragment is not None:
                owners[name] = archive
                fragments.append(fragment)
        return fragments

    def _extract(self, archive: Path, target: Path) -> Fragment | None:
        """Copy the fragment out of *archive* to *target*, if present."""
        self._log.debug("scanning_archive", archive=str(archive))
        owner = archive.stem
        try:
            with zipfile.ZipFile(archive) as zf:
                try:
                    info = zf.getinfo(self.entry_path)
                except KeyError:
                    return None
                if info.is_dir():
                    return None
                with zf.open(info) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
        except (zipfile.BadZipFile, OSError) as exc:
            raise IoError(
                archive,
                f"error processing partial plist files from archive {archive}: {exc}",
            ) from exc

        kind = (
            FragmentKind.CODE_CONTRIBUTED
            if owner == CLASSES_OWNER
            else FragmentKind.ORDINARY
        )
        self._log.debug(
            "archive_fragment_copied",
            archive=str(archive),
            entry=self.entry_path,
            target=str(target),
            kind=kind.value,
        )
        return Fragment(path=target, kind=kind, source=str(archive))
