"""Synchronous external tool invocation.

Every subprocess launched by the pipeline goes through :class:`ToolRunner`:
compiler runs (``actool``, ``ibtool``) through :meth:`ToolRunner.run` and
toolchain queries (``xcrun``, ``xcodebuild``, ``sw_vers``) through
:meth:`ToolRunner.capture`.  There is no timeout; a hung tool blocks the
build.
"""

import subprocess
from pathlib import Path

from pydantic import BaseModel

from app.utils.logging import get_logger
from models.errors import ToolInvocationError

log = get_logger("toolchain.runner")


class ToolResult(BaseModel):
    returncode: int
    stdout:     str = ""
    artifact:   Path | None = None
    """Declared output artifact (e.g. the partial Info.plist), if any."""


class ToolRunner:
    """Run external tools and turn non-zero exits into :class:`ToolInvocationError`."""

    def run(
        self,
        command: str | Path,
        args: list[str],
        tool: str,
        category: str,
        artifact: Path | None = None,
    ) -> ToolResult:
        """Run *command* with *args*; raise on a non-zero exit status.

        Args:
            command:  Executable path (usually resolved with ``xcrun -f``).
            args:     Argument list, without the executable.
            tool:     Short tool name for messages (``actool``).
            category: Resource category being processed (``asset catalog``).
            artifact: Output file the tool was asked to produce.
        """
        cmd = [str(command), *args]
        log.debug("tool_invoked", tool=tool, category=category, cmd=" ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            raise ToolInvocationError(tool, category, -1, str(exc)) from exc

        output = (proc.stdout or "") + (proc.stderr or "")
        if proc.returncode != 0:
            log.error(
                "tool_failed",
                tool=tool,
                category=category,
                returncode=proc.returncode,
            )
            raise ToolInvocationError(tool, category, proc.returncode, output)

        if output.strip():
            log.debug("tool_output", tool=tool, output=output.strip())
        return ToolResult(returncode=proc.returncode, stdout=proc.stdout or "", artifact=artifact)

    def capture(self, args: list[str]) -> str:
        """Run a query command and return its stripped stdout."""
        return self.run(args[0], args[1:], tool=Path(args[0]).name, category="toolchain query").stdout.strip()
