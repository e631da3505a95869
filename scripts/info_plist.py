#!/usr/bin/env python3
"""info-plist — CLI for Info.plist assembly.

Usage:
    info-plist merge   --base <plist> --toolchain <json> --out-binary <path> --out-text <path> [...]
    info-plist process --config <project.json>
    info-plist verify

Subcommands:
    merge     Merge a base Info.plist with toolchain metadata and fragments.
    process   Full build step: resources, validation, collection, merge (needs Xcode).
    verify    Merge twice and assert byte-identical binary and XML output.
              Requires RUN_DIR pointing to a directory containing Info.plist,
              toolchain.json and (optionally) partial-plists/.

Exit codes:
    0  — success
    1  — merge / validation error, or non-deterministic output
    2  — invalid usage or missing input file
"""
import os
import subprocess
import sys
from pathlib import Path

_SCRIPTS_DIR = Path(__file__).resolve().parent
_MERGE_SCRIPT = _SCRIPTS_DIR / "merge_info_plist.py"
_PROCESS_SCRIPT = _SCRIPTS_DIR / "process_info_plist.py"

_USAGE = """\
Usage:
  info-plist merge --base <path> --toolchain <path> --out-binary <path> --out-text <path>
  info-plist process --config <path>
  info-plist verify
"""


# ---------------------------------------------------------------------------
# merge / process
# ---------------------------------------------------------------------------

def cmd_merge(argv: list[str]) -> int:
    return subprocess.run([sys.executable, str(_MERGE_SCRIPT), *argv]).returncode


def cmd_process(argv: list[str]) -> int:
    return subprocess.run([sys.executable, str(_PROCESS_SCRIPT), *argv]).returncode


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------

def _outputs(run_dir: Path) -> tuple[Path, Path]:
    return run_dir / "out" / "Info.plist", run_dir / "out" / "Info.xml.plist"


def _run_merge(run_dir: Path) -> bool:
    binary, text = _outputs(run_dir)
    cmd = [
        sys.executable, str(_MERGE_SCRIPT),
        "--base", str(run_dir / "Info.plist"),
        "--toolchain", str(run_dir / "toolchain.json"),
        "--fragments", str(run_dir / "partial-plists"),
        "--out-binary", str(binary),
        "--out-text", str(text),
    ]
    return subprocess.run(cmd, capture_output=True).returncode == 0


def cmd_verify() -> int:
    run_dir_str = os.environ.get("RUN_DIR")
    if not run_dir_str:
        print("ERROR: info-plist verification failed", file=sys.stderr)
        return 1
    run_dir = Path(run_dir_str)
    binary, text = _outputs(run_dir)

    # Round 1
    if not _run_merge(run_dir):
        print("ERROR: info-plist verification failed", file=sys.stderr)
        return 1
    round_1 = (binary.read_bytes(), text.read_bytes())

    # Round 2
    if not _run_merge(run_dir):
        print("ERROR: info-plist verification failed", file=sys.stderr)
        return 1
    round_2 = (binary.read_bytes(), text.read_bytes())

    if round_1 != round_2:
        print("ERROR: info-plist verification failed", file=sys.stderr)
        return 1

    print("OK: info-plist verified")
    return 0


# ---------------------------------------------------------------------------
# entry point
# ---------------------------------------------------------------------------

def main() -> None:
    if len(sys.argv) < 2:
        print(_USAGE, file=sys.stderr)
        sys.exit(2)

    subcmd, rest = sys.argv[1], sys.argv[2:]

    if subcmd == "merge":
        sys.exit(cmd_merge(rest))
    elif subcmd == "process":
        sys.exit(cmd_process(rest))
    elif subcmd == "verify":
        sys.exit(cmd_verify())
    else:
        print(f"Unknown subcommand: {subcmd!r}\n{_USAGE}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
