"""Toolchain identification values written into every final Info.plist."""

import json
from pathlib import Path

import jsonschema
from pydantic import BaseModel

from models.errors import ParseError

_SCHEMA_PATH = (
    Path(__file__).resolve().parent.parent
    / "contracts" / "schemas" / "ToolchainMetadata.v1.json"
)


class ToolchainMetadata(BaseModel):
    """Read-only platform / SDK / Xcode identification strings.

    These are never user-supplied: the merge overwrites them unconditionally.
    """

    platform_name:          str
    sdk_name:               str
    platform_version:       str
    platform_build:         str
    sdk_build:              str
    xcode:                  str
    xcode_build:            str
    build_machine_os_build: str
    supported_platforms:    list[str]

    def to_entries(self) -> list[tuple[str, str | list[str]]]:
        """Info.plist entries in the order they are written."""
        return [
            ("DTPlatformName", self.platform_name),
            ("DTSDKName", self.sdk_name),
            ("CFBundleSupportedPlatforms", list(self.supported_platforms)),
            ("DTPlatformVersion", self.platform_version),
            ("DTPlatformBuild", self.platform_build),
            ("DTSDKBuild", self.sdk_build),
            ("DTXcode", self.xcode),
            ("DTXcodeBuild", self.xcode_build),
            ("BuildMachineOSBuild", self.build_machine_os_build),
        ]

    @classmethod
    def load(cls, path: Path | str) -> "ToolchainMetadata":
        """Load a recorded toolchain description (``toolchain.json``).

        Raises:
            ParseError: If the file is missing, not JSON, or does not conform
                to ``ToolchainMetadata.v1.json``.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ParseError(path, str(exc)) from exc

        schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ParseError(
                path, f"does not conform to ToolchainMetadata.v1.json: {exc.message}"
            ) from exc
        return cls(**data)
