"""Build directory layout for one application build.

Layout under ``build_root``::

    gensrc/<os>/Info.plist            generated manifest (no user manifest)
    gensrc/<os>/assets/               generated default resources
    app/<AppName>.app/                application bundle
    tmp/partial-plists/               scratch directory for fragments
    tmp/storyboards/                  intermediate compiled storyboards
    tmp/Info.plist                    XML copy of the final manifest

User-authored sources live under ``source_root/<os>/``.
"""

from pathlib import Path

from pydantic import BaseModel

from app.models.project_config import ProjectConfiguration

PLIST_FILE = "Info.plist"
ASSETS_FOLDER = "assets"
PARTIAL_PLIST_DIR = "partial-plists"
STORYBOARDS_DIR = "storyboards"


class BuildPaths(BaseModel):
    source_path: Path
    gen_path:    Path
    app_path:    Path
    tmp_path:    Path
    source_os:   str = "ios"
    app_name:    str

    @classmethod
    def for_project(cls, config: ProjectConfiguration) -> "BuildPaths":
        root = config.build_root
        return cls(
            source_path=config.source_root,
            gen_path=root / "gensrc",
            app_path=root / "app",
            tmp_path=root / "tmp",
            source_os=config.target_os,
            app_name=config.app_name,
        )

    @property
    def source_os_dir(self) -> Path:
        return self.source_path / self.source_os

    @property
    def gen_os_dir(self) -> Path:
        return self.gen_path / self.source_os

    @property
    def user_plist(self) -> Path:
        return self.source_os_dir / PLIST_FILE

    @property
    def gen_plist(self) -> Path:
        return self.gen_os_dir / PLIST_FILE

    @property
    def user_assets(self) -> Path:
        return self.source_os_dir / ASSETS_FOLDER

    @property
    def gen_assets(self) -> Path:
        return self.gen_os_dir / ASSETS_FOLDER

    @property
    def app_bundle(self) -> Path:
        return self.app_path / f"{self.app_name}.app"

    @property
    def partial_plist_dir(self) -> Path:
        return self.tmp_path / PARTIAL_PLIST_DIR

    @property
    def storyboards_dir(self) -> Path:
        return self.tmp_path / STORYBOARDS_DIR
