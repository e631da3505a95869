"""Built-in default Info.plist and iOS resources.

Seeded into the generated-sources tree when the project provides none.
"""

import shutil
from pathlib import Path

from models.errors import IoError

TEMPLATES_ROOT = Path(__file__).resolve().parent / "templates" / "ios"

DEFAULT_PLIST = "Default-Info.plist"

LAUNCH_ASSETS: list[str] = [
    "Default-375w-667h@2x~iphone.png",
    "Default-414w-736h@3x~iphone.png",
    "Default-portrait@2x~ipad.png",
    "Default-375w-812h-landscape@3x~iphone.png",
    "Default-568h@2x~iphone.png",
    "Default-portrait~ipad.png",
    "Default-375w-812h@3x~iphone.png",
    "Default-landscape@2x~ipad.png",
    "Default@2x~iphone.png",
    "Default-414w-736h-landscape@3x~iphone.png",
    "Default-414w-896h@3x~iphone.png",
    "Default-414w-896h-landscape@3x~iphone.png",
    "Default-landscape~ipad.png",
    "iTunesArtwork",
    "iTunesArtwork@2x",
]

APP_ICON_SET = "Assets.xcassets/AppIcon.appiconset"

ICON_ASSETS: list[str] = [
    "Contents.json",
    "App-app-store-icon-1024@1x.png",
    "App-ipad-app-icon-76@1x.png",
    "App-ipad-app-icon-76@2x.png",
    "App-ipad-notifications-icon-20@1x.png",
    "App-ipad-notifications-icon-20@2x.png",
    "App-ipad-pro-app-icon-83.5@2x.png",
    "App-ipad-settings-icon-29@1x.png",
    "App-ipad-settings-icon-29@2x.png",
    "App-ipad-spotlight-icon-40@1x.png",
    "App-ipad-spotlight-icon-40@2x.png",
    "App-iphone-app-icon-60@2x.png",
    "App-iphone-app-icon-60@3x.png",
    "App-iphone-notification-icon-20@2x.png",
    "App-iphone-notification-icon-20@3x.png",
    "App-iphone-spotlight-icon-40@2x.png",
    "App-iphone-spotlight-icon-40@3x.png",
    "App-iphone-spotlight-settings-icon-29@2x.png",
    "App-iphone-spotlight-settings-icon-29@3x.png",
]

STORYBOARDS: list[str] = ["LaunchScreen.storyboard", "MainScreen.storyboard"]


def default_asset_paths() -> list[str]:
    """Every seeded asset, relative to the assets directory."""
    return (
        list(LAUNCH_ASSETS)
        + [f"{APP_ICON_SET}/{name}" for name in ICON_ASSETS]
        + [f"Base.lproj/{name}" for name in STORYBOARDS]
        + ["Assets.xcassets/Contents.json"]
    )


def copy_template(relative: str, target: Path) -> Path:
    """Copy ``templates/ios/<relative>`` to *target*, creating parents."""
    source = TEMPLATES_ROOT / relative
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as exc:
        raise IoError(target, f"error copying resource {relative}: {exc}") from exc
    return target


def seed_default_plist(target: Path) -> Path:
    return copy_template(DEFAULT_PLIST, target)


def seed_default_storyboards(base_lproj: Path) -> list[Path]:
    return [
        copy_template(f"assets/Base.lproj/{name}", base_lproj / name)
        for name in STORYBOARDS
    ]


def seed_default_assets(assets_dir: Path) -> list[Path]:
    """Copy the full default resource set into *assets_dir*."""
    return [
        copy_template(f"assets/{relative}", assets_dir / relative)
        for relative in default_asset_paths()
    ]
