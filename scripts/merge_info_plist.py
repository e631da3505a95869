#!/usr/bin/env python3
"""Merge a base Info.plist with recorded toolchain metadata and fragments.

Runs only the merge step, without Xcode, so a recorded build can be
re-assembled and inspected anywhere.

Usage:
    python scripts/merge_info_plist.py \\
        --base       /path/to/Info.plist \\
        --toolchain  /path/to/toolchain.json \\
        --fragments  /path/to/partial-plists \\
        --out-binary /path/to/App.app/Info.plist \\
        --out-text   /path/to/tmp/Info.plist \\
        [--classpath a.jar:classes.jar] [--min-os 12.0]

Exit codes:
    0  — merged successfully
    1  — parse / validation / I/O error
    2  — bad arguments / input file not found
"""

import argparse
import os
import sys
from pathlib import Path

# Ensure project root is on sys.path so models/*, mergers/* etc. are importable
# when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.utils.logging import configure_logging  # noqa: E402
from collectors.archive import ContributionCollector  # noqa: E402
from mergers.info_plist import merge_info_plist, write_info_plist  # noqa: E402
from models.context import DEFAULT_MIN_OS_VERSION  # noqa: E402
from models.errors import InfoPlistError  # noqa: E402
from models.manifest import Manifest  # noqa: E402
from toolchain.metadata import ToolchainMetadata  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base", required=True, metavar="PATH",
                        help="Base Info.plist (XML or binary).")
    parser.add_argument("--toolchain", required=True, metavar="PATH",
                        help="toolchain.json conforming to ToolchainMetadata.v1.json.")
    parser.add_argument("--fragments", metavar="DIR",
                        help="Scratch directory holding *_Partial.plist fragments.")
    parser.add_argument("--classpath", metavar="PATHS",
                        help="os.pathsep-joined archives to collect fragments from "
                             "into --fragments before merging.")
    parser.add_argument("--out-binary", required=True, metavar="PATH",
                        help="Where to write the binary Info.plist.")
    parser.add_argument("--out-text", required=True, metavar="PATH",
                        help="Where to write the XML Info.plist.")
    parser.add_argument("--min-os", default=DEFAULT_MIN_OS_VERSION, metavar="VERSION",
                        help=f"MinimumOSVersion to pin (default {DEFAULT_MIN_OS_VERSION}).")
    parser.add_argument("--log-level", default=os.environ.get("INFOPLIST_LOG_LEVEL", "WARNING"))
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    base_path = Path(args.base)
    toolchain_path = Path(args.toolchain)
    scratch_dir = Path(args.fragments) if args.fragments else None

    # 1. Validate input paths
    for path in (base_path, toolchain_path):
        if not path.exists():
            print(f"ERROR: input file not found: {path}", file=sys.stderr)
            sys.exit(2)
    if args.classpath and scratch_dir is None:
        print("ERROR: --classpath requires --fragments", file=sys.stderr)
        sys.exit(2)

    # 2. Load, collect, merge, write
    try:
        toolchain = ToolchainMetadata.load(toolchain_path)
        base = Manifest.load(base_path)
        collected = []
        if args.classpath:
            collected = ContributionCollector().collect(args.classpath, scratch_dir)
        final = merge_info_plist(
            base,
            toolchain,
            scratch_dir=scratch_dir,
            fragments=collected,
            min_os_version=args.min_os,
            base_path=base_path,
        )
        write_info_plist(final, Path(args.out_binary), Path(args.out_text))
    except InfoPlistError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    # 3. Summary
    print(f"OK: {len(final)} keys → {args.out_binary}")


if __name__ == "__main__":
    main()
