import os
import re
import platform
import logging

from core.errors import SaveFolderNotFound, AmbiguousSaveFolder, IOFailure

logger = logging.getLogger(__name__)

SAVE_ROOT_ENV = "ERSM_SAVE_ROOT"
STEAM_APP_ID = "1245620"
SAVE_FOLDER_PATTERN = re.compile(r"^[0-9]+$")


def default_save_root():
    """Platform save root for Elden Ring, overridable through ERSM_SAVE_ROOT"""
    override = os.environ.get(SAVE_ROOT_ENV)
    if override:
        return os.path.normpath(os.path.expanduser(override))

    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", os.path.join(os.path.expanduser("~"), "AppData", "Roaming"))
        return os.path.join(appdata, "EldenRing")

    # Steam Play (Proton) keeps the Windows layout inside the compat prefix
    return os.path.join(
        os.path.expanduser("~"), ".local", "share", "Steam", "steamapps", "compatdata",
        STEAM_APP_ID, "pfx", "drive_c", "users", "steamuser", "AppData", "Roaming", "EldenRing"
    )


def find_save_folder(save_root):
    """Return the name of the single all-digits folder under save_root"""
    if not os.path.isdir(save_root):
        raise SaveFolderNotFound(f"Save root does not exist: {save_root}")

    try:
        with os.scandir(save_root) as entries:
            candidates = sorted(
                entry.name for entry in entries
                if entry.is_dir() and SAVE_FOLDER_PATTERN.match(entry.name)
            )
    except OSError as e:
        raise IOFailure(f"Cannot read save root {save_root}: {str(e)}") from e
    if not candidates:
        raise SaveFolderNotFound(f"No numeric save folder found in {save_root}")
    if len(candidates) > 1:
        raise AmbiguousSaveFolder(save_root, candidates)

    logger.debug("Active save folder: %s", candidates[0])
    return candidates[0]


def current_save_dir(save_root):
    return os.path.join(save_root, find_save_folder(save_root))
