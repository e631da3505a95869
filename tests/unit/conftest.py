"""Shared fixtures: a recording tool runner and canned toolchain metadata.

No test launches a real external tool.  :class:`FakeRunner` records every
invocation, answers toolchain queries from a table, writes the partial
Info.plist each compiler was asked for, and can be told to fail a tool.
"""

import plistlib
import zipfile
from pathlib import Path

import pytest

from models.errors import ToolInvocationError
from toolchain.metadata import ToolchainMetadata
from toolchain.runner import ToolResult, ToolRunner

XCODE_BIN = "/Applications/Xcode.app/Contents/Developer/usr/bin"

DEFAULT_QUERIES: dict[str, str] = {
    "xcrun --sdk iphoneos --show-sdk-version": "17.2",
    "xcrun --sdk iphoneos --show-sdk-build-version": "21C52",
    "xcodebuild -version": "Xcode 15.2\nBuild version 15C500b",
    "sw_vers -buildVersion": "23C71",
}


class FakeRunner(ToolRunner):
    def __init__(
        self,
        fragments: dict[str, dict] | None = None,
        fail: str | None = None,
        queries: dict[str, str] | None = None,
    ) -> None:
        self.fragments = fragments or {}
        self.fail = fail
        self.queries = {**DEFAULT_QUERIES, **(queries or {})}
        self.calls: list[tuple[str, str, list[str]]] = []
        self.queried: list[str] = []

    def run(self, command, args, tool, category, artifact=None):
        self.calls.append((tool, category, list(args)))
        if tool == self.fail:
            raise ToolInvocationError(tool, category, 1, "simulated failure")
        if artifact is not None:
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(plistlib.dumps(self.fragments.get(tool, {})))
        if tool == "ibtool" and "--compilation-directory" in args:
            out = Path(args[args.index("--compilation-directory") + 1])
            (out / (Path(args[-1]).name + "c")).mkdir(parents=True, exist_ok=True)
        return ToolResult(returncode=0, artifact=artifact)

    def capture(self, args):
        key = " ".join(args)
        self.queried.append(key)
        if args[0] == "xcrun" and "-f" in args:
            return f"{XCODE_BIN}/{args[-1]}"
        return self.queries[key]

    def tool_calls(self, tool: str) -> list[list[str]]:
        return [args for name, _, args in self.calls if name == tool]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def toolchain_metadata() -> ToolchainMetadata:
    return ToolchainMetadata(
        platform_name="iphoneos",
        sdk_name="iphoneos17.2",
        platform_version="17.2",
        platform_build="21C52",
        sdk_build="21C52",
        xcode="1520",
        xcode_build="15C500b",
        build_machine_os_build="23C71",
        supported_platforms=["iphoneos"],
    )


def write_plist(path: Path, data: dict, fmt=plistlib.FMT_XML) -> Path:
    """Write *data* as a property list at *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(plistlib.dumps(data, fmt=fmt, sort_keys=False))
    return path


def write_jar(path: Path, entries: dict[str, bytes]) -> Path:
    """Create a zip archive at *path* with the given members."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, payload in entries.items():
            zf.writestr(name, payload)
    return path
