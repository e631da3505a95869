"""Build-output checks that gate Info.plist assembly.

Unlike a warning-only validator, every failure here raises
:class:`~models.errors.ValidationError`: the bundle cannot ship without its
executable, and the merge cannot proceed without its required keys.
"""

import os
from pathlib import Path
from typing import Any

from app.utils.logging import get_logger
from models.errors import ValidationError
from models.manifest import Manifest

logger = get_logger("validators.bundle")

EXECUTABLE_KEY = "CFBundleExecutable"


class BundleValidator:
    """Validates the compiled app bundle against its manifest."""

    def validate_executable(
        self,
        app_bundle: Path,
        executable_name: str,
        app_name: str,
        plist: Path | None = None,
    ) -> Path:
        """Check ``<app_bundle>/<executable_name>`` exists and is executable.

        Returns:
            The executable path.

        Raises:
            ValidationError: If the file is missing or lacks the execute bit.
                When a file named after the app exists instead, the message
                says which ``CFBundleExecutable`` value to put in *plist*.
        """
        executable = app_bundle / executable_name
        if not executable.is_file():
            message = f"The executable {executable} doesn't exist."
            if app_name != executable_name and (app_bundle / app_name).exists():
                message += (
                    f"\nMake sure the {EXECUTABLE_KEY} key in the "
                    f"{plist or 'Info.plist'} file is set to: {app_name}"
                )
            logger.error("executable_missing", path=str(executable))
            raise ValidationError(message, key=EXECUTABLE_KEY, path=plist)

        if not os.access(executable, os.X_OK):
            logger.error("executable_not_executable", path=str(executable))
            raise ValidationError(
                f"The file {executable} is not executable.",
                key=EXECUTABLE_KEY,
                path=plist,
            )
        return executable

    def require_key(self, manifest: Manifest, key: str, path: Path | None = None) -> Any:
        """Return ``manifest[key]`` or raise with the key and file to edit."""
        if key not in manifest:
            where = path or "the Info.plist"
            raise ValidationError(
                f"{key} key was not found in plist file {where}.\n"
                f"Please check {where} and make sure the {key} key exists.",
                key=key,
                path=path,
            )
        return manifest.get(key)
