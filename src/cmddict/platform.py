"""Code that handles platform specific behaviour."""
from __future__ import annotations

import contextlib
import os
import sys
from pathlib import Path

__all__ = [
    'terminal_title',
    'user_config_dir',
]

APP_DIR_NAME = 'cmddict'


def user_config_dir() -> Path:
    """Find the directory that holds the user's global settings.

    The CMDDICT_CONFIG_HOME environment variable, if set, takes precedence.
    Otherwise the platform's usual location is used.
    """
    override = os.getenv('CMDDICT_CONFIG_HOME')
    if override:
        return Path(override)
    if sys.platform == 'win32':                              # pragma: no cover
        base = os.getenv('APPDATA') or Path.home() / 'AppData' / 'Roaming'
    elif sys.platform == 'darwin':                           # pragma: no cover
        base = Path.home() / 'Library' / 'Application Support'
    else:
        base = os.getenv('XDG_CONFIG_HOME') or Path.home() / '.config'
    return Path(base) / APP_DIR_NAME


@contextlib.contextmanager
def terminal_title(title: str):
    """Temporarily set the text terminal's title."""
    if sys.platform == 'win32':                              # pragma: no cover
        yield None
        return

    print('\x1b[22;0t', end='')
    print(f'\x1b]0;{title}\x07', end='')
    sys.stdout.flush()
    try:
        yield None
    finally:
        print('\x1b[23;0t', end='')
        sys.stdout.flush()
