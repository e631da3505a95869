"""Xcode / SDK facade.

Answers the identification questions the merge needs (platform name, SDK
version and build, Xcode version and build, host OS build) and resolves the
path of a named compiler for an SDK.  Every query runs once per facade
instance, so repeated reads are stable and their order does not matter.
"""

import re
from enum import Enum
from functools import cached_property
from pathlib import Path

from app.utils.logging import get_logger
from models.errors import ValidationError
from toolchain.metadata import ToolchainMetadata
from toolchain.runner import ToolRunner

log = get_logger("toolchain.xcode")

_XCODE_VERSION_RE = re.compile(r"^Xcode\s+(\S+)", re.MULTILINE)
_XCODE_BUILD_RE = re.compile(r"^Build version\s+(\S+)", re.MULTILINE)


class Sdk(str, Enum):
    MACOSX          = "macosx"
    IPHONEOS        = "iphoneos"
    IPHONESIMULATOR = "iphonesimulator"

    @property
    def sdk_name(self) -> str:
        return self.value


def format_dt_xcode(version: str) -> str:
    """Convert ``15.2`` / ``14.3.1`` to the four-digit ``DTXcode`` form."""
    parts = (version.split(".") + ["0", "0"])[:3]
    major, minor, patch = parts
    return f"{int(major):02d}{minor[:1]}{patch[:1]}"


class XcodeToolchain:
    """Facade over ``xcrun``, ``xcodebuild`` and ``sw_vers``.

    Args:
        sdk:    Target SDK.
        runner: Runner used for every query (injected by tests).
    """

    def __init__(self, sdk: Sdk | str, runner: ToolRunner | None = None) -> None:
        self.sdk = Sdk(sdk)
        self.runner = runner or ToolRunner()

    @cached_property
    def sdk_version(self) -> str:
        return self.runner.capture(
            ["xcrun", "--sdk", self.sdk.sdk_name, "--show-sdk-version"]
        )

    @cached_property
    def sdk_build_version(self) -> str:
        return self.runner.capture(
            ["xcrun", "--sdk", self.sdk.sdk_name, "--show-sdk-build-version"]
        )

    @cached_property
    def _xcodebuild_version(self) -> str:
        return self.runner.capture(["xcodebuild", "-version"])

    @cached_property
    def xcode_version(self) -> str:
        match = _XCODE_VERSION_RE.search(self._xcodebuild_version)
        if not match:
            raise ValidationError(
                "Could not determine the Xcode version from `xcodebuild -version`.\n"
                "Make sure Xcode is installed and selected with `xcode-select`."
            )
        return match.group(1)

    @cached_property
    def xcode_build(self) -> str:
        match = _XCODE_BUILD_RE.search(self._xcodebuild_version)
        if not match:
            raise ValidationError(
                "Could not determine the Xcode build from `xcodebuild -version`."
            )
        return match.group(1)

    @cached_property
    def build_machine_os_build(self) -> str:
        return self.runner.capture(["sw_vers", "-buildVersion"])

    @property
    def platform_name(self) -> str:
        return self.sdk.sdk_name

    @property
    def sdk_name(self) -> str:
        return self.sdk.sdk_name + self.sdk_version

    def command_for_sdk(self, tool: str, sdk_name: str | None = None) -> Path:
        """Resolve the absolute path of *tool* for *sdk_name* via ``xcrun -f``."""
        sdk_name = sdk_name or self.sdk.sdk_name
        path = self.runner.capture(["xcrun", "-sdk", sdk_name, "-f", tool])
        log.debug("tool_resolved", tool=tool, sdk=sdk_name, path=path)
        return Path(path)

    def metadata(self) -> ToolchainMetadata:
        """Collect every identification value the merge writes."""
        return ToolchainMetadata(
            platform_name=self.platform_name,
            sdk_name=self.sdk_name,
            platform_version=self.sdk_version,
            platform_build=self.sdk_build_version,
            sdk_build=self.sdk_build_version,
            xcode=format_dt_xcode(self.xcode_version),
            xcode_build=self.xcode_build,
            build_machine_os_build=self.build_machine_os_build,
            supported_platforms=[self.sdk.sdk_name],
        )
