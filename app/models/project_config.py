"""Typed project configuration consumed by the Info.plist pipeline.

The configuration arrives as JSON (validated against
``contracts/schemas/ProjectConfiguration.v1.json`` by the CLI) and is parsed
into these Pydantic v2 models.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_BUNDLE_VERSION = "1.0"
DEFAULT_BUNDLE_SHORT_VERSION = "1.0"


class ReleaseConfiguration(BaseModel):
    bundle_name:          str | None = None
    bundle_version:       str | None = None
    bundle_short_version: str | None = None


class ResolvedRelease(BaseModel):
    """Release values after defaults are applied."""

    bundle_name: str
    bundle_version: str
    bundle_short_version: str


class ProjectConfiguration(BaseModel):
    app_name:    str
    app_id:      str | None = None
    target_os:   str = "ios"
    sdk:         str = "iphoneos"
    classpath:   list[Path] = Field(default_factory=list)
    release:     ReleaseConfiguration = Field(default_factory=ReleaseConfiguration)
    build_root:  Path = Path("target")
    source_root: Path = Path("src")

    @field_validator("classpath", mode="before")
    @classmethod
    def _split_classpath(cls, v):
        """Accept a single ``os.pathsep``-joined string as well as a list."""
        if isinstance(v, str):
            return [p for p in v.split(os.pathsep) if p]
        return v

    def resolved_release(self) -> ResolvedRelease:
        """Return the release values with app name / built-in defaults filled in."""
        return ResolvedRelease(
            bundle_name=self.release.bundle_name or self.app_name,
            bundle_version=self.release.bundle_version or DEFAULT_BUNDLE_VERSION,
            bundle_short_version=(
                self.release.bundle_short_version or DEFAULT_BUNDLE_SHORT_VERSION
            ),
        )
