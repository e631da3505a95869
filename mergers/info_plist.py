"""Merge engine — fold base manifest, toolchain metadata and fragments.

Order of operations (each ``put`` moves the key to the end):

  1. ``CFBundleVersion`` from the base manifest, pinned first.
  2. Every other base key, in the base manifest's order.
  3. Toolchain metadata, unconditionally.
  4. Fragments from the scratch directory (non-recursive ``*.plist``)…
  5. …sorted ordinary-before-code-contributed, then by path…
  6. …each one's keys put in file order, later fragments winning
     (``CFBundleVersion`` is updated in place and keeps its first slot).
  7. ``MinimumOSVersion`` pinned last to the tracked deployment target.

The result is built fresh on every call and never mutated afterwards.
"""

from collections.abc import Iterable
from pathlib import Path

from app.utils.logging import get_logger
from models.context import DEFAULT_MIN_OS_VERSION
from models.errors import ValidationError
from models.fragment import Fragment
from models.manifest import Manifest
from toolchain.metadata import ToolchainMetadata

log = get_logger("mergers.info_plist")

BUNDLE_VERSION_KEY = "CFBundleVersion"
MINIMUM_OS_VERSION_KEY = "MinimumOSVersion"


def discover_fragments(scratch_dir: Path | None) -> list[Fragment]:
    """List fragment files directly inside *scratch_dir*.

    A missing directory means no fragments.
    """
    if scratch_dir is None or not scratch_dir.is_dir():
        return []
    return [
        Fragment.classify(p)
        for p in scratch_dir.iterdir()
        if p.is_file() and p.name.endswith(".plist")
    ]


def order_fragments(fragments: Iterable[Fragment]) -> list[Fragment]:
    """Return *fragments* in merge order, de-duplicated by path.

    When the same path appears twice, the explicitly tagged entry (the first
    one seen) is kept.
    """
    unique: dict[str, Fragment] = {}
    for fragment in fragments:
        unique.setdefault(str(fragment.path), fragment)
    return sorted(unique.values(), key=Fragment.sort_key)


def merge_info_plist(
    base: Manifest,
    toolchain: ToolchainMetadata,
    scratch_dir: Path | None = None,
    fragments: Iterable[Fragment] = (),
    min_os_version: str | None = DEFAULT_MIN_OS_VERSION,
    base_path: Path | None = None,
) -> Manifest:
    """Build the final ordered Info.plist.

    Args:
        base:           Base manifest; ``CFBundleVersion`` is removed from it.
        toolchain:      Identification values, always written.
        scratch_dir:    Directory scanned for fragment files.
        fragments:      Already tagged fragments (e.g. from the collector);
                        combined with the ones discovered on disk.
        min_os_version: Deployment target tracked during resource
                        compilation; ``None`` falls back to ``11.0``.
        base_path:      File the base manifest came from, for messages.

    Raises:
        ValidationError: The base manifest has no ``CFBundleVersion``.
        ParseError:      A fragment is not a valid property list.
    """
    if BUNDLE_VERSION_KEY not in base:
        raise ValidationError(
            f"The {BUNDLE_VERSION_KEY} key was not found in "
            f"{base_path or 'the base Info.plist'}.\n"
            f"Add a {BUNDLE_VERSION_KEY} entry to that file.",
            key=BUNDLE_VERSION_KEY,
            path=base_path,
        )

    # 1-2. build version first, then the rest of the base in order.
    ordered = Manifest()
    ordered.put(BUNDLE_VERSION_KEY, base.get(BUNDLE_VERSION_KEY))
    base.remove(BUNDLE_VERSION_KEY)
    for key, value in base.items():
        ordered.put(key, value)

    # 3. toolchain metadata.
    for key, value in toolchain.to_entries():
        ordered.put(key, value)

    # 4-6. fragments.
    merge_order = order_fragments([*fragments, *discover_fragments(scratch_dir)])
    for fragment in merge_order:
        partial = Manifest.load(fragment.path)
        log.debug(
            "fragment_merged",
            path=str(fragment.path),
            kind=fragment.kind.value,
            keys=len(partial),
        )
        for key, value in partial.items():
            if key == BUNDLE_VERSION_KEY:
                # stays first
                ordered.set(key, value)
            else:
                ordered.put(key, value)

    # 7. deployment target last.
    ordered.put(MINIMUM_OS_VERSION_KEY, min_os_version or DEFAULT_MIN_OS_VERSION)
    return ordered


def write_info_plist(manifest: Manifest, binary_path: Path, text_path: Path) -> None:
    """Write *manifest* as binary (bundle copy) and XML (diagnostic copy)."""
    manifest.save_binary(binary_path)
    manifest.save_text(text_path)
    log.debug("info_plist_written", binary=str(binary_path), text=str(text_path))
