"""
Per-application settings locations.

    Windows:    %APPDATA%/<app>/<app>.<ext>
    elsewhere:  $XDG_CONFIG_HOME/<app>/<app>.<ext>  (~/.config by default)

``VNML_CONFIG_HOME`` overrides the base directory on every platform.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_HOME_ENV = "VNML_CONFIG_HOME"


def config_home() -> Path:
    override = os.environ.get(CONFIG_HOME_ENV)
    if override:
        return Path(override)
    if sys.platform == "win32" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"])
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_settings_dir(app_name: str, create: bool = True) -> Path:
    """Settings directory of ``app_name``, created unless ``create=False``."""
    path = config_home() / app_name
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def get_settings_file(app_name: str, extension: str, create_dir: bool = True) -> Path:
    """Settings file ``<app>.<ext>``; ``"*.xml"``, ``".xml"`` and ``"xml"`` all work."""
    extension = extension.lstrip("*.")
    return get_settings_dir(app_name, create_dir) / f"{app_name}.{extension}"


def delete_settings_dir(app_name: str) -> bool:
    """Remove the settings directory of ``app_name`` with its contents.

    Returns False if it could not be removed. A missing directory counts
    as removed.
    """
    path = config_home() / app_name
    try:
        if path.exists():
            shutil.rmtree(path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)
        return False
    return True
