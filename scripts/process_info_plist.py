#!/usr/bin/env python3
"""Assemble the final Info.plist for a project build (requires Xcode).

Usage:
    python scripts/process_info_plist.py --config /path/to/project.json

The configuration must conform to contracts/schemas/ProjectConfiguration.v1.json.
``INFOPLIST_BUILD_ROOT`` overrides its ``build_root``.

Exit codes:
    0  — Info.plist written
    1  — invalid configuration, validation, tool or I/O error
    2  — bad arguments / configuration file not found
"""

import argparse
import json
import os
import sys
from pathlib import Path

import jsonschema

# Ensure project root is on sys.path so models/*, pipeline/* etc. are importable
# when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.models.project_config import ProjectConfiguration  # noqa: E402
from app.utils.logging import configure_logging  # noqa: E402
from models.errors import InfoPlistError  # noqa: E402
from pipeline.info_plist import InfoPlistProcessor  # noqa: E402

# ---------------------------------------------------------------------------
# Contract schema — loaded once at import time relative to project root.
# ---------------------------------------------------------------------------
_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts" / "schemas"
_SCHEMA_CONFIG = json.loads((_CONTRACTS_DIR / "ProjectConfiguration.v1.json").read_text(encoding="utf-8"))


def load_config(path: Path) -> ProjectConfiguration:
    """Read, schema-check and parse a project configuration file.

    Raises:
        ValueError: If the file is not JSON or violates the contract.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ValueError(f"failed to load {path}: {exc}") from exc
    try:
        jsonschema.validate(instance=data, schema=_SCHEMA_CONFIG)
    except jsonschema.ValidationError as exc:
        raise ValueError(
            f"configuration does not conform to ProjectConfiguration.v1.json: {exc.message}"
        ) from exc

    build_root = os.environ.get("INFOPLIST_BUILD_ROOT")
    if build_root:
        data["build_root"] = build_root
    return ProjectConfiguration(**data)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--config", "-c", required=True, metavar="PATH",
                        help="Project configuration JSON.")
    parser.add_argument("--log-level", default=os.environ.get("INFOPLIST_LOG_LEVEL", "INFO"))
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"ERROR: configuration file not found: {config_path}", file=sys.stderr)
        sys.exit(2)

    try:
        config = load_config(config_path)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    processor = InfoPlistProcessor(config)
    try:
        processor.process()
    except InfoPlistError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    for notice in processor.notices:
        print(notice)
    print(f"OK: {processor.paths.app_bundle / 'Info.plist'} (bundle id {processor.bundle_id})")


if __name__ == "__main__":
    main()
