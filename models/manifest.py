"""Ordered property-list manifest (the Info.plist data structure).

Order is part of the contract: both serializations are written with
``sort_keys=False`` so the key order chosen by the merge is the byte layout
on disk.  :meth:`Manifest.put` moves an updated key to the end
of the order; :meth:`Manifest.set` updates without moving it.
"""

import plistlib
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from models.errors import IoError, ParseError


class Manifest:
    """Insertion-ordered key/value store with explicit relocation on update.

    Usage::

        manifest = Manifest.load(Path("Info.plist"))
        manifest.put("CFBundleName", "HelloWorld")
        manifest.save_binary(app_dir / "Info.plist")
        manifest.save_text(tmp_dir / "Info.plist")
    """

    def __init__(self, entries: dict[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] = {}
        for key, value in (entries or {}).items():
            self.put(key, value)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | str) -> "Manifest":
        """Parse an XML or binary property list whose root is a dictionary.

        Raises:
            ParseError: If the file is absent, unreadable, malformed or its
                root object is not a dictionary.
        """
        path = Path(path)
        if not path.is_file():
            raise ParseError(path, "file not found")
        try:
            with path.open("rb") as fp:
                data = plistlib.load(fp)
        except OSError as exc:
            raise ParseError(path, f"unreadable: {exc}") from exc
        except (
            plistlib.InvalidFileException,
            ExpatError,
            ValueError,
            AttributeError,
            TypeError,
        ) as exc:
            raise ParseError(path, f"not a valid property list: {exc}") from exc

        if not isinstance(data, dict):
            raise ParseError(
                path, f"root object is {type(data).__name__}, expected dict"
            )
        return cls(data)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def put(self, key: str, value: Any) -> None:
        """Insert *key*, or update it and move it to the end of the order."""
        self._entries.pop(key, None)
        self._entries[key] = value

    def set(self, key: str, value: Any) -> None:
        """Insert *key*, or update it keeping its current position."""
        self._entries[key] = value

    def remove(self, key: str) -> None:
        """Remove *key*; a missing key is not an error."""
        self._entries.pop(key, None)

    def update_from(self, other: "Manifest") -> None:
        """``put`` every entry of *other*, in *other*'s order."""
        for key, value in other.items():
            self.put(key, value)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._entries.items())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        # Content equality; order is compared separately through keys().
        if isinstance(other, Manifest):
            return self.to_dict() == other.to_dict()
        if isinstance(other, dict):
            return self.to_dict() == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Manifest({self._entries!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` copy, converting nested manifests."""
        return {key: _plain(value) for key, value in self._entries.items()}

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_binary(self) -> bytes:
        return plistlib.dumps(self.to_dict(), fmt=plistlib.FMT_BINARY, sort_keys=False)

    def to_text(self) -> bytes:
        return plistlib.dumps(self.to_dict(), fmt=plistlib.FMT_XML, sort_keys=False)

    def save_binary(self, path: Path | str) -> Path:
        """Write the compact binary property list to *path*."""
        return self._write(Path(path), self.to_binary())

    def save_text(self, path: Path | str) -> Path:
        """Write the XML property list to *path*."""
        return self._write(Path(path), self.to_text())

    def _write(self, path: Path, payload: bytes) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as exc:
            raise IoError(path, f"write failed: {exc}") from exc
        return path


def _plain(value: Any) -> Any:
    """Recursively convert nested :class:`Manifest` values to dicts."""
    if isinstance(value, Manifest):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
