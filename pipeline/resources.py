"""ResourcePipeline — compile storyboards and asset catalogs into the bundle.

Per build:
  1. ``Base.lproj`` storyboards → ``ibtool`` compile (one fragment each) →
     ``ibtool --link`` into the app bundle.
  2. Plain files in the assets directory → copied into the app bundle.
     ``*.xcassets`` catalogs → ``actool --compile`` (one fragment each).
  3. User-provided extra directories → copied verbatim into the bundle.

Every compiler is asked to write its partial Info.plist into the scratch
directory, where the merge picks it up.
"""

import shutil
from pathlib import Path

from app.utils.logging import get_logger
from models.context import ResourceContext, ResourceResult
from models.errors import IoError
from models.fragment import Fragment, fragment_name
from models.paths import BuildPaths
from pipeline.templates import seed_default_storyboards
from toolchain.runner import ToolRunner
from toolchain.xcode import XcodeToolchain

BASE_LPROJ = "Base.lproj"
ASSET_CATALOG = "Assets.xcassets"

_APP_ICON_SET = ".appiconset"
_LAUNCH_IMAGE = ".launchimage"


def _reset_dir(path: Path) -> None:
    """Delete *path* if present and recreate it empty."""
    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError(path, f"cannot reset directory: {exc}") from exc


def asset_catalog_args(catalog: Path) -> list[str]:
    """``--app-icon`` / ``--launch-image`` flags for every set in *catalog*."""
    args: list[str] = []
    for p in sorted(catalog.rglob("*")):
        if not p.is_dir():
            continue
        if p.name.endswith(_APP_ICON_SET):
            args += ["--app-icon", p.name[: -len(_APP_ICON_SET)]]
        elif p.name.endswith(_LAUNCH_IMAGE):
            args += ["--launch-image", p.name[: -len(_LAUNCH_IMAGE)]]
    return args


def _device_args(context: ResourceContext) -> list[str]:
    args: list[str] = []
    for device in context.devices:
        args += ["--target-device", device]
    return args


class ResourcePipeline:
    """Coordinate the resource compilers for one application build.

    Args:
        paths:     Build directory layout.
        toolchain: Resolves ``actool`` / ``ibtool`` for the SDK.
        runner:    Runs the compilers; injected by tests.
    """

    def __init__(
        self,
        paths: BuildPaths,
        toolchain: XcodeToolchain,
        runner: ToolRunner | None = None,
    ) -> None:
        self.paths = paths
        self.toolchain = toolchain
        self.runner = runner or toolchain.runner
        self._log = get_logger("pipeline.resources")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def prepare_scratch(self) -> Path:
        """Clear and recreate the fragment scratch directory."""
        _reset_dir(self.paths.partial_plist_dir)
        return self.paths.partial_plist_dir

    def run(
        self,
        assets_dir: Path,
        context: ResourceContext,
        user_provided: bool = False,
    ) -> ResourceResult:
        """Compile every resource category found under *assets_dir*.

        Raises:
            ToolInvocationError: A compiler exited non-zero.
            IoError:             A copy or directory operation failed.
        """
        if not assets_dir.is_dir():
            raise IoError(assets_dir, "invalid resources path")
        self.paths.partial_plist_dir.mkdir(parents=True, exist_ok=True)

        fragments = self.compile_storyboards(assets_dir / BASE_LPROJ, context)
        fragments += self.compile_assets(assets_dir, context)
        if user_provided:
            self.copy_other_assets(assets_dir)

        return ResourceResult(min_os_version=context.min_os_version, fragments=fragments)

    # ------------------------------------------------------------------
    # Storyboards (ibtool)
    # ------------------------------------------------------------------

    def compile_storyboards(self, base_lproj: Path, context: ResourceContext) -> list[Fragment]:
        if not base_lproj.exists():
            self._log.info("default_storyboards_added", path=str(base_lproj))
            seed_default_storyboards(base_lproj)

        _reset_dir(self.paths.storyboards_dir)
        compiled_dir = self.paths.storyboards_dir / BASE_LPROJ
        compiled_dir.mkdir(parents=True, exist_ok=True)

        ibtool = self.toolchain.command_for_sdk("ibtool", context.platform)
        fragments: list[Fragment] = []
        for storyboard in sorted(base_lproj.glob("*.storyboard")):
            if storyboard.is_file():
                fragments.append(
                    self._compile_storyboard(ibtool, storyboard, compiled_dir, context)
                )
        self._link_storyboards(ibtool, compiled_dir, context)
        return fragments

    def _compile_storyboard(
        self,
        ibtool: Path,
        storyboard: Path,
        compiled_dir: Path,
        context: ResourceContext,
    ) -> Fragment:
        partial = self.paths.partial_plist_dir / fragment_name(storyboard.name)
        args = [
            "--output-format", "human-readable-text",
            "--output-partial-info-plist", str(partial),
            "--minimum-deployment-target", context.min_os_version,
            *_device_args(context),
            "--compilation-directory", str(compiled_dir),
            str(storyboard),
        ]
        self._log.debug("compiling_storyboard", storyboard=str(storyboard))
        self.runner.run(ibtool, args, tool="ibtool", category="storyboard", artifact=partial)
        return Fragment.classify(partial, source="ibtool")

    def _link_storyboards(self, ibtool: Path, compiled_dir: Path, context: ResourceContext) -> None:
        compiled = sorted(p for p in compiled_dir.glob("*.storyboardc") if p.is_dir())
        args = [
            "--output-format", "human-readable-text",
            "--minimum-deployment-target", context.min_os_version,
            *_device_args(context),
            "--link", str(self.paths.app_bundle),
            *(str(p) for p in compiled),
        ]
        self.paths.app_bundle.mkdir(parents=True, exist_ok=True)
        self.runner.run(ibtool, args, tool="ibtool", category="storyboard link")

    # ------------------------------------------------------------------
    # Asset catalogs (actool) and plain files
    # ------------------------------------------------------------------

    def compile_assets(self, assets_dir: Path, context: ResourceContext) -> list[Fragment]:
        fragments: list[Fragment] = []
        for p in sorted(assets_dir.iterdir()):
            if p.is_dir():
                if p.name.endswith(".xcassets"):
                    fragments.append(self.compile_asset_catalog(p, context))
            else:
                self._copy_file(p, self.paths.app_bundle / p.name)
        return fragments

    def compile_asset_catalog(self, catalog: Path, context: ResourceContext) -> Fragment:
        output_dir = self.paths.app_bundle
        output_dir.mkdir(parents=True, exist_ok=True)
        partial = self.paths.partial_plist_dir / fragment_name(catalog.name)

        args = [
            "--output-format", "human-readable-text",
            *asset_catalog_args(catalog),
            "--output-partial-info-plist", str(partial),
            "--platform", context.platform,
            "--minimum-deployment-target", context.min_os_version,
            *_device_args(context),
            "--compress-pngs",
            "--compile", str(output_dir),
            str(catalog),
        ]
        actool = self.toolchain.command_for_sdk("actool", context.platform)
        self._log.debug("compiling_asset_catalog", catalog=str(catalog))
        self.runner.run(actool, args, tool="actool", category="asset catalog", artifact=partial)
        return Fragment.classify(partial, source="actool")

    def copy_other_assets(self, assets_dir: Path) -> list[Path]:
        """Copy directories other than the catalog and ``Base.lproj`` verbatim."""
        copied: list[Path] = []
        for p in sorted(assets_dir.iterdir()):
            if not p.is_dir() or p.name in (ASSET_CATALOG, BASE_LPROJ):
                continue
            target = self.paths.app_bundle / p.name
            try:
                if target.exists():
                    shutil.rmtree(target)
                shutil.copytree(p, target)
            except OSError as exc:
                raise IoError(target, f"error copying directory {p}: {exc}") from exc
            self._log.debug("asset_directory_copied", source=str(p), target=str(target))
            copied.append(target)
        return copied

    def _copy_file(self, source: Path, target: Path) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            raise IoError(target, f"error copying {source}: {exc}") from exc
