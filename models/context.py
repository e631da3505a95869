"""Context threaded through resource compilation and into the merge."""

from pydantic import BaseModel, Field

from models.fragment import Fragment

DEFAULT_MIN_OS_VERSION = "11.0"
DEFAULT_TARGET_DEVICES: list[str] = ["iphone", "ipad"]


class ResourceContext(BaseModel):
    """Inputs shared by every compiler invocation of one build."""

    platform: str
    """SDK name passed to ``--platform`` and used to locate the tools."""

    min_os_version: str = DEFAULT_MIN_OS_VERSION
    """Deployment target passed to ``--minimum-deployment-target``."""

    devices: list[str] = Field(default_factory=lambda: list(DEFAULT_TARGET_DEVICES))
    """Values for repeated ``--target-device`` flags."""


class ResourceResult(BaseModel):
    """What resource compilation hands to the merge step."""

    min_os_version: str = DEFAULT_MIN_OS_VERSION
    """Lowest deployment target used by any compiled resource."""

    fragments: list[Fragment] = Field(default_factory=list)
    """Partial manifests emitted by the compilers, in invocation order."""
