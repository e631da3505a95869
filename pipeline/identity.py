"""Bundle-identity initialization.

The base manifest moves through three states, re-derived from the
filesystem on every build (nothing is persisted between runs):

  UNINITIALIZED    no user Info.plist under ``src/<os>/``
  TEMPLATE_SEEDED  the default template was copied to ``gensrc/<os>/``
  INITIALIZED      a manifest (user or template) exists and is the merge base

Identity fields are then written in one of two ways:

* freshly templated: executable name, bundle id, display name, version and
  short version are set unconditionally;
* pre-existing user manifest: display name / version / short version are
  only overwritten when the configured value differs from its built-in
  default **and** from the value already in the file.  Executable name and
  bundle id are never changed on an existing manifest; they are read back
  and checked against the compiled output instead.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from app.models.project_config import (
    DEFAULT_BUNDLE_SHORT_VERSION,
    DEFAULT_BUNDLE_VERSION,
    ProjectConfiguration,
)
from app.utils.logging import get_logger
from models.errors import ValidationError
from models.manifest import Manifest
from models.paths import BuildPaths
from pipeline.templates import seed_default_assets, seed_default_plist
from validators.bundle import BundleValidator

log = get_logger("pipeline.identity")

EXECUTABLE_KEY = "CFBundleExecutable"
BUNDLE_ID_KEY = "CFBundleIdentifier"
BUNDLE_NAME_KEY = "CFBundleName"
BUNDLE_VERSION_KEY = "CFBundleVersion"
SHORT_VERSION_KEY = "CFBundleShortVersionString"


class InitState(str, Enum):
    UNINITIALIZED   = "uninitialized"
    TEMPLATE_SEEDED = "template_seeded"
    INITIALIZED     = "initialized"


class IdentityInit(BaseModel):
    """Outcome of :meth:`BundleIdentityInitializer.ensure_manifest`."""

    state: InitState
    plist: Path
    freshly_templated: bool = False
    notice: str = ""


class AssetsInit(BaseModel):
    """Outcome of :meth:`BundleIdentityInitializer.ensure_assets`."""

    assets_dir: Path
    user_provided: bool
    notice: str = ""


def plist_path(paths: BuildPaths) -> Path | None:
    """User Info.plist if present, else the generated one, else ``None``."""
    if paths.user_plist.exists():
        return paths.user_plist
    if paths.gen_plist.exists():
        return paths.gen_plist
    return None


def read_executable_name(plist: Path | None, app_name: str) -> str:
    """``CFBundleExecutable`` from *plist*, or *app_name* when there is none."""
    if plist is None:
        return app_name
    value = BundleValidator().require_key(Manifest.load(plist), EXECUTABLE_KEY, plist)
    log.debug("executable_name", value=str(value))
    return str(value)


def read_bundle_id(plist: Path | None, app_id: str | None) -> str:
    """``CFBundleIdentifier`` from *plist*, or *app_id* when there is none."""
    if plist is None:
        if not app_id:
            raise ValidationError(
                "No bundle id was found: app_id is required when no Info.plist "
                "is provided.",
                key=BUNDLE_ID_KEY,
            )
        return app_id
    value = BundleValidator().require_key(Manifest.load(plist), BUNDLE_ID_KEY, plist)
    log.debug("bundle_id", value=str(value))
    return str(value)


def _has_entries(directory: Path) -> bool:
    return directory.is_dir() and any(directory.iterdir())


class BundleIdentityInitializer:
    """Seed defaults when needed and write identity fields into the base plist."""

    def __init__(self, paths: BuildPaths, config: ProjectConfiguration) -> None:
        self.paths = paths
        self.config = config
        self.state = InitState.UNINITIALIZED

    def ensure_manifest(self) -> IdentityInit:
        """Make sure a base manifest exists; seed the template if needed."""
        notice = ""
        fresh = False
        if self.paths.user_plist.exists():
            plist = self.paths.user_plist
        else:
            self.state = InitState.UNINITIALIZED
            plist = self.paths.gen_plist
            log.debug("copy_default_plist", target=str(plist))
            seed_default_plist(plist)
            self.state = InitState.TEMPLATE_SEEDED
            fresh = True
            notice = (
                f"Default iOS plist generated in {plist}.\n"
                f"Consider copying it to {self.paths.source_os_dir} "
                "before performing any modification"
            )
            log.info("default_plist_generated", path=str(plist), copy_to=str(self.paths.source_os_dir))

        if plist.exists():
            self.state = InitState.INITIALIZED
        return IdentityInit(state=self.state, plist=plist, freshly_templated=fresh, notice=notice)

    def ensure_assets(self) -> AssetsInit:
        """Use the user assets directory, or seed the defaults when it is empty."""
        if _has_entries(self.paths.user_assets):
            return AssetsInit(assets_dir=self.paths.user_assets, user_provided=True)

        seed_default_assets(self.paths.gen_assets)
        notice = (
            f"Default iOS resources generated in {self.paths.gen_os_dir}.\n"
            f"Consider copying them to {self.paths.source_os_dir} "
            "before performing any modification"
        )
        log.info("default_resources_generated", path=str(self.paths.gen_os_dir), copy_to=str(self.paths.source_os_dir))
        return AssetsInit(assets_dir=self.paths.gen_assets, user_provided=False, notice=notice)

    def apply_identity(
        self,
        manifest: Manifest,
        plist: Path,
        freshly_templated: bool,
        executable_name: str,
        bundle_id: str,
    ) -> bool:
        """Write identity fields into *manifest* and save it back to *plist*.

        Returns:
            True when *plist* was rewritten.
        """
        release = self.config.resolved_release()

        if freshly_templated:
            manifest.set(BUNDLE_ID_KEY, bundle_id)
            manifest.set(EXECUTABLE_KEY, executable_name)
            manifest.set(BUNDLE_NAME_KEY, release.bundle_name)
            manifest.set(BUNDLE_VERSION_KEY, release.bundle_version)
            manifest.set(SHORT_VERSION_KEY, release.bundle_short_version)
            manifest.save_text(plist)
            return True

        gated = [
            (BUNDLE_NAME_KEY, release.bundle_name, self.config.app_name),
            (BUNDLE_VERSION_KEY, release.bundle_version, DEFAULT_BUNDLE_VERSION),
            (SHORT_VERSION_KEY, release.bundle_short_version, DEFAULT_BUNDLE_SHORT_VERSION),
        ]
        modified = False
        for key, configured, default in gated:
            current = manifest.get(key)
            if configured != default and (current is None or configured != str(current)):
                manifest.set(key, configured)
                modified = True

        if modified:
            log.debug("updating_plist_from_release_configuration", path=str(plist))
            manifest.save_text(plist)
        return modified
