"""End-to-end subprocess tests for scripts/merge_info_plist.py and
scripts/process_info_plist.py argument / configuration handling.

The merge script runs without Xcode, so it is exercised as a real
subprocess; stdout, stderr and returncode are captured naturally.
"""

import json
import os
import plistlib
import subprocess
import sys
from pathlib import Path

import pytest

from conftest import write_jar, write_plist
from models.fragment import ARCHIVE_FRAGMENT_PATH

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SCRIPTS = Path(__file__).resolve().parents[2] / "scripts"
MERGE_SCRIPT = SCRIPTS / "merge_info_plist.py"
PROCESS_SCRIPT = SCRIPTS / "process_info_plist.py"


def _write_toolchain(path: Path, toolchain_metadata) -> Path:
    path.write_text(toolchain_metadata.model_dump_json(), encoding="utf-8")
    return path


def _run(args: list[str], script: Path = MERGE_SCRIPT, env: dict | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(script), *args],
        env={**os.environ, **(env or {})},
        capture_output=True,
        text=True,
    )


def _merge_args(tmp_path: Path, *extra: str) -> list[str]:
    return [
        "--base", str(tmp_path / "Info.plist"),
        "--toolchain", str(tmp_path / "toolchain.json"),
        "--out-binary", str(tmp_path / "out" / "Info.plist"),
        "--out-text", str(tmp_path / "out" / "Info.xml.plist"),
        *extra,
    ]


# ---------------------------------------------------------------------------
# merge_info_plist.py
# ---------------------------------------------------------------------------


def test_merge_ok_summary(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1", "CFBundleName": "X"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)
    write_plist(tmp_path / "partial-plists" / "a_Partial.plist", {"Foo": "1"})
    write_plist(tmp_path / "partial-plists" / "classes_Partial.plist", {"Foo": "2"})

    result = _run(_merge_args(tmp_path, "--fragments", str(tmp_path / "partial-plists")))

    assert result.returncode == 0, result.stderr
    # 2 base + 9 toolchain + Foo + MinimumOSVersion
    assert result.stdout.strip() == f"OK: 13 keys → {tmp_path / 'out' / 'Info.plist'}"
    final = plistlib.loads((tmp_path / "out" / "Info.plist").read_bytes())
    assert final["Foo"] == "2"
    assert list(final)[0] == "CFBundleVersion"
    assert list(final)[-1] == "MinimumOSVersion"


def test_merge_min_os_flag(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)

    result = _run(_merge_args(tmp_path, "--min-os", "14.0"))

    assert result.returncode == 0, result.stderr
    final = plistlib.loads((tmp_path / "out" / "Info.xml.plist").read_bytes())
    assert final["MinimumOSVersion"] == "14.0"


def test_merge_collects_classpath(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)
    jar = write_jar(tmp_path / "libs" / "maps.jar", {
        ARCHIVE_FRAGMENT_PATH: plistlib.dumps({"NSLocationWhenInUseUsageDescription": "maps"}),
    })
    scratch = tmp_path / "partial-plists"

    result = _run(_merge_args(tmp_path, "--fragments", str(scratch), "--classpath", str(jar)))

    assert result.returncode == 0, result.stderr
    assert (scratch / "maps_Partial.plist").is_file()
    final = plistlib.loads((tmp_path / "out" / "Info.plist").read_bytes())
    assert final["NSLocationWhenInUseUsageDescription"] == "maps"


def test_merge_classpath_requires_fragments(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)

    result = _run(_merge_args(tmp_path, "--classpath", "a.jar"))

    assert result.returncode == 2
    assert "--classpath requires --fragments" in result.stderr


def test_merge_missing_input_exits_2(tmp_path: Path, toolchain_metadata) -> None:
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)
    result = _run(_merge_args(tmp_path))
    assert result.returncode == 2
    assert "ERROR: input file not found" in result.stderr


def test_merge_missing_bundle_version_exits_1(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleName": "X"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)

    result = _run(_merge_args(tmp_path))

    assert result.returncode == 1
    assert "CFBundleVersion" in result.stderr
    assert not (tmp_path / "out" / "Info.plist").exists()


def test_merge_bad_toolchain_exits_1(tmp_path: Path) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1"})
    (tmp_path / "toolchain.json").write_text(json.dumps({"xcode": "15.2"}), encoding="utf-8")

    result = _run(_merge_args(tmp_path))

    assert result.returncode == 1
    assert "ToolchainMetadata.v1.json" in result.stderr


def test_merge_malformed_fragment_exits_1(tmp_path: Path, toolchain_metadata) -> None:
    write_plist(tmp_path / "Info.plist", {"CFBundleVersion": "1"})
    _write_toolchain(tmp_path / "toolchain.json", toolchain_metadata)
    scratch = tmp_path / "partial-plists"
    scratch.mkdir()
    (scratch / "broken_Partial.plist").write_text("<plist><dict>", encoding="utf-8")

    result = _run(_merge_args(tmp_path, "--fragments", str(scratch)))

    assert result.returncode == 1
    assert "broken_Partial.plist" in result.stderr


# ---------------------------------------------------------------------------
# process_info_plist.py
# ---------------------------------------------------------------------------


def test_process_missing_config_exits_2(tmp_path: Path) -> None:
    result = _run(["--config", str(tmp_path / "project.json")], script=PROCESS_SCRIPT)
    assert result.returncode == 2
    assert "configuration file not found" in result.stderr


def test_process_invalid_config_exits_1(tmp_path: Path) -> None:
    config = tmp_path / "project.json"
    config.write_text(json.dumps({"app_name": "Demo", "sdk": "watchos"}), encoding="utf-8")

    result = _run(["--config", str(config)], script=PROCESS_SCRIPT)

    assert result.returncode == 1
    assert "ProjectConfiguration.v1.json" in result.stderr


def test_load_config_applies_build_root_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from scripts.process_info_plist import load_config

    config = tmp_path / "project.json"
    config.write_text(json.dumps({
        "app_name": "Demo",
        "app_id": "com.acme.demo",
        "classpath": os.pathsep.join(["libs/a.jar", "libs/classes.jar"]),
        "release": {"bundle_version": "3"},
    }), encoding="utf-8")
    monkeypatch.setenv("INFOPLIST_BUILD_ROOT", str(tmp_path / "build"))

    parsed = load_config(config)

    assert parsed.build_root == tmp_path / "build"
    assert parsed.classpath == [Path("libs/a.jar"), Path("libs/classes.jar")]
    assert parsed.resolved_release().bundle_version == "3"
    assert parsed.resolved_release().bundle_name == "Demo"


def test_load_config_rejects_unknown_fields(tmp_path: Path) -> None:
    from scripts.process_info_plist import load_config

    config = tmp_path / "project.json"
    config.write_text(json.dumps({"app_name": "Demo", "surprise": True}), encoding="utf-8")

    with pytest.raises(ValueError, match="ProjectConfiguration.v1.json"):
        load_config(config)
