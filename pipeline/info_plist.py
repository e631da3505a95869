"""InfoPlistProcessor — end-to-end Info.plist assembly for one app build.

Sequence (strictly sequential, single pass):

  1. Read executable name and bundle id from any existing manifest.
  2. Ensure a base manifest and resources exist (seed defaults if not).
  3. Clear the scratch directory and compile resources into the bundle;
     each compiler deposits a fragment.
  4. Check the compiled executable; nothing is merged or written before
     this passes.
  5. Collect archive-embedded fragments from the classpath.
  6. Write identity fields into the base, merge, and write the final
     manifest as binary (in the bundle) and XML (in the tmp dir).
"""

from pathlib import Path

from app.models.project_config import ProjectConfiguration
from app.utils.logging import get_logger
from collectors.archive import ContributionCollector
from mergers.info_plist import merge_info_plist, write_info_plist
from models.context import ResourceContext
from models.manifest import Manifest
from models.paths import PLIST_FILE, BuildPaths
from pipeline.identity import (
    BUNDLE_ID_KEY,
    BundleIdentityInitializer,
    plist_path,
    read_bundle_id,
    read_executable_name,
)
from pipeline.resources import ResourcePipeline
from toolchain.runner import ToolRunner
from toolchain.xcode import XcodeToolchain
from validators.bundle import BundleValidator


class InfoPlistProcessor:
    """Assemble and write the final Info.plist for *config*.

    Usage::

        processor = InfoPlistProcessor(config)
        base_plist = processor.process()
        print(processor.bundle_id)

    Args:
        config:    Parsed project configuration.
        paths:     Build layout; derived from *config* when omitted.
        toolchain: Xcode facade; built for ``config.sdk`` when omitted.
        runner:    Tool runner shared by the facade and the compilers.
    """

    def __init__(
        self,
        config: ProjectConfiguration,
        paths: BuildPaths | None = None,
        toolchain: XcodeToolchain | None = None,
        runner: ToolRunner | None = None,
    ) -> None:
        self.config = config
        self.paths = paths or BuildPaths.for_project(config)
        self.runner = runner or (toolchain.runner if toolchain else ToolRunner())
        self.toolchain = toolchain or XcodeToolchain(config.sdk, self.runner)
        self.identity = BundleIdentityInitializer(self.paths, config)
        self.resources = ResourcePipeline(self.paths, self.toolchain, self.runner)
        self.collector = ContributionCollector()
        self.validator = BundleValidator()
        self.bundle_id: str | None = None
        self.notices: list[str] = []
        self._log = get_logger("pipeline.info_plist")

    def process(self) -> Path:
        """Run the whole sequence and return the base manifest path."""
        app_name = self.config.app_name

        # 1. identity as currently declared on disk.
        existing = plist_path(self.paths)
        executable_name = read_executable_name(existing, app_name)
        bundle_id = read_bundle_id(existing, self.config.app_id)

        # 2. base manifest and resources.
        init = self.identity.ensure_manifest()
        assets = self.identity.ensure_assets()
        self.notices = [n for n in (init.notice, assets.notice) if n]

        # 3. resource compilation.
        self.resources.prepare_scratch()
        context = ResourceContext(platform=self.toolchain.sdk.sdk_name)
        result = self.resources.run(assets.assets_dir, context, user_provided=assets.user_provided)

        # 4. compiled executable.
        self.validator.validate_executable(
            self.paths.app_bundle, executable_name, app_name, init.plist
        )

        # 5. dependency fragments.
        collected = self.collector.collect(self.config.classpath, self.paths.partial_plist_dir)

        # 6. identity, merge, write.
        base = Manifest.load(init.plist)
        self.identity.apply_identity(
            base, init.plist, init.freshly_templated, executable_name, bundle_id
        )
        final = merge_info_plist(
            base,
            self.toolchain.metadata(),
            scratch_dir=self.paths.partial_plist_dir,
            fragments=[*result.fragments, *collected],
            min_os_version=result.min_os_version,
            base_path=init.plist,
        )
        write_info_plist(
            final,
            self.paths.app_bundle / PLIST_FILE,
            self.paths.tmp_path / PLIST_FILE,
        )

        for key, value in final.items():
            if key == BUNDLE_ID_KEY:
                self.bundle_id = str(value)
                self._log.debug("bundle_id", value=self.bundle_id)
            self._log.debug("info_plist_entry", key=key, value=value)
        return init.plist
