"""Error taxonomy for Info.plist assembly.

Every error is fatal for the build; nothing here is retried.  CLI entry
points catch :class:`InfoPlistError` and turn it into ``ERROR: ...`` on
stderr with exit code 1.
"""

from pathlib import Path


class InfoPlistError(Exception):
    """Base class for all Info.plist assembly failures."""


class ParseError(InfoPlistError):
    """A manifest or fragment is absent, unreadable or not a property list."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Error parsing property list {self.path}: {reason}")


class IoError(InfoPlistError):
    """Filesystem or archive access failure."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"I/O error on {self.path}: {reason}")


class ValidationError(InfoPlistError):
    """Missing or non-executable build output, or a required key is absent.

    The message always carries remediation guidance; ``key`` and ``path``
    name the manifest key and the file to edit when they apply.
    """

    def __init__(
        self,
        message: str,
        key: str | None = None,
        path: Path | str | None = None,
    ) -> None:
        self.key = key
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class ToolInvocationError(InfoPlistError):
    """An external compiler or query tool exited with a non-zero status."""

    def __init__(
        self,
        tool: str,
        category: str,
        returncode: int,
        output: str = "",
    ) -> None:
        self.tool = tool
        self.category = category
        self.returncode = returncode
        self.output = output
        message = f"{tool} failed for {category} (exit code {returncode})"
        if output:
            message += f":\n{output.strip()}"
        super().__init__(message)
