from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir as _uc

APP_NAME = "pyminini"
APP_NAME_ENV = "MININI_APP_NAME"
DEFAULT_FILENAME = "settings.ini"


def user_config_dir(app_name: str = APP_NAME) -> Path:
    """Per-user directory for *app_name*; ``$MININI_APP_NAME`` takes precedence."""
    return Path(_uc(appname=os.environ.get(APP_NAME_ENV) or app_name)).resolve()


def user_config_file(app_name: str = APP_NAME, filename: str = DEFAULT_FILENAME) -> Path:
    """Return the per-user INI file for *app_name*.

    The directory is created if missing; the file itself is not, since the
    first write creates it.
    """
    base = user_config_dir(app_name)
    base.mkdir(parents=True, exist_ok=True)
    return base / filename
