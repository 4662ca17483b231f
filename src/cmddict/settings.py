"""Settings: where the list of commands comes from.

Commands are configured in JSON settings files, at several scopes. A more
specific scope completely hides a broader one; the lists are never merged. The
scopes, most specific first, are:

folder
    ``.cmddict/settings.json`` in the current directory.
workspace
    ``.cmddict.json`` in the current directory, or the file named using the
    ``--workspace`` option.
global
    ``settings.json`` in the user's configuration directory.

Each settings file is a JSON object. The commands are held as a list under the
key ``commandDictionary.commands``. The nested form ``{"commandDictionary":
{"commands": [...]}}`` is also accepted. A file may also provide language
specific values within a ``"[<language>]"`` object. These take precedence over
all non-language values when the application is started for that language.

If no scope provides a value then the commands bundled with the application
are used.
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from .commands import CommandRecord, commands_from_config
from .platform import user_config_dir

logger = logging.getLogger(__name__)

SECTION = 'commandDictionary'
KEY = 'commands'
DEFAULTS_PATH = Path(__file__).parent / 'resources' / 'default_commands.json'


def first_set_value(candidates: Iterable[Any]) -> Any:
    """Choose the first value that has been set.

    :candidates:
        Values ordered from most to least specific. ``None`` means that a
        scope does not set a value.
    :return:
        The first value that is not ``None``, or ``None`` if there is no such
        value.
    """
    for value in candidates:
        if value is not None:
            return value
    return None


def lookup_commands(data: Any) -> Any:
    """Extract the raw commands value from a settings object.

    :return:
        The raw value, which need not be a list, or ``None`` if it is not set.
    """
    if not isinstance(data, dict):
        return None
    value = data.get(f'{SECTION}.{KEY}')
    if value is None:
        section = data.get(SECTION)
        if isinstance(section, dict):
            value = section.get(KEY)
    return value


class SettingsLayer:
    """A single settings scope, backed by a JSON file.

    :name: A name for the scope; used in log messages.
    :path: The path of the settings file. This need not exist.
    """

    def __init__(self, name: str, path: Path | str):
        self.name = name
        self.path = Path(path)

    def read(self) -> dict | None:
        """Read and parse the settings file.

        :return:
            The parsed object or ``None`` if the file does not exist or cannot
            be parsed.
        """
        try:
            text = self.path.read_text(encoding='utf8')
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning(
                'Could not read %s settings %s: %s',
                self.name, self.path, exc.strerror)
            return None
        try:
            data = json.loads(text)
        except ValueError as exc:
            logger.warning(
                'Ignoring %s settings %s: %s', self.name, self.path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning(
                'Ignoring %s settings %s: not a JSON object',
                self.name, self.path)
            return None
        return data

    def value(self, language: str | None = None) -> Any:
        """Get the raw commands value for this scope.

        :language:
            If provided, only the language specific value is returned.
        """
        data = self.read()
        if data is not None and language:
            data = data.get(f'[{language}]')
        return lookup_commands(data)

    def __repr__(self):
        return f'SettingsLayer({self.name!r}, {str(self.path)!r})'


def standard_layers(
        cwd: Path | None = None,
        workspace: Path | None = None,
        config_dir: Path | None = None,
    ) -> list[SettingsLayer]:
    """Create the standard settings layers, most specific first."""
    cwd = cwd or Path.cwd()
    config_dir = config_dir or user_config_dir()
    return [
        SettingsLayer('folder', cwd / '.cmddict' / 'settings.json'),
        SettingsLayer('workspace', workspace or cwd / '.cmddict.json'),
        SettingsLayer('global', config_dir / 'settings.json'),
    ]


def load_default_commands(
        path: Path | str | None = None) -> list[CommandRecord]:
    """Load the commands used when no settings provide any.

    Invalid entries are silently dropped. A missing or corrupt file is logged
    and treated as an empty list.
    """
    path = Path(path) if path else DEFAULTS_PATH
    try:
        raw = json.loads(path.read_text(encoding='utf8'))
    except (OSError, ValueError) as exc:
        logger.error('Failed to load default commands from %s: %s', path, exc)
        return []
    if not isinstance(raw, list):
        logger.error('Default commands in %s are not a JSON list', path)
        return []
    return commands_from_config(raw)


class Settings:
    """The configuration source for commands.

    :layers:   The settings scopes, most specific first.
    :defaults: The commands to use when no scope sets a value.
    :language: The language for language specific values, if any.
    """

    def __init__(
            self,
            layers: Sequence[SettingsLayer],
            defaults: Sequence[CommandRecord] = (),
            *,
            language: str | None = None):
        self.layers = list(layers)
        self.defaults = list(defaults)
        self.language = language

    @property
    def paths(self) -> list[Path]:
        """The paths of all the settings files."""
        return [layer.path for layer in self.layers]

    def candidates(self) -> list[Any]:
        """The raw value from every scope, most specific first.

        Language specific values, when a language is set, precede all other
        values.
        """
        values = []
        if self.language:
            values.extend(layer.value(self.language) for layer in self.layers)
        values.extend(layer.value() for layer in self.layers)
        return values

    def commands(self) -> list[CommandRecord]:
        """Provide the current list of commands.

        A value that is set but is not a list causes the defaults to be used.
        """
        value = first_set_value(self.candidates())
        if not isinstance(value, list):
            return list(self.defaults)
        return commands_from_config(value)


class SettingsMonitor:
    """Watches settings files for changes.

    Files are polled for changes to their modification times. A file appearing
    or disappearing also counts as a change.
    """

    def __init__(self, paths: Iterable[Path], *, interval: float = 0.5):
        self.paths = list(paths)
        self.interval = interval
        self.monitor_task: asyncio.Task | None = None
        self.stop_event = asyncio.Event()
        self.mtimes = self.snapshot()

    def snapshot(self) -> dict[Path, tuple[int, int] | None]:
        """Get the modification time and size of all the files."""
        return {path: file_stamp(path) for path in self.paths}

    def changed(self) -> bool:
        """Check for and record any changes since the previous check."""
        mtimes = self.snapshot()
        if mtimes != self.mtimes:
            self.mtimes = mtimes
            return True
        return False

    def start_monitoring(self, on_change_callback: Callable[[], None]) -> None:
        """Start a task that monitors for changes to the files.

        This does nothing if monitoring is already running.
        """
        if self.monitor_task is not None:
            logger.debug('Settings monitor is already running')
            return
        self.stop_event.clear()
        self.mtimes = self.snapshot()
        self.monitor_task = asyncio.create_task(
            self.monitor(on_change_callback), name='monitor_settings')

    async def stop_monitoring(self) -> None:
        """Stop monitoring for changes."""
        if self.monitor_task:
            self.stop_event.set()
            await self.monitor_task
            self.monitor_task = None

    async def monitor(self, on_change_callback: Callable[[], None]) -> None:
        """Task that monitors for changes to the files."""
        async def pause(delay) -> bool:
            await asyncio.wait([stop_waiter], timeout=delay)
            return not self.stop_event.is_set()

        stop_waiter = asyncio.create_task(
            self.stop_event.wait(), name='monitor_stopper')
        while await pause(self.interval):
            if self.changed():
                logger.info('Settings have changed')
                on_change_callback()


def file_stamp(path: Path) -> tuple[int, int] | None:
    """The modification time and size of a file, or None if it is missing."""
    try:
        st = path.stat()
    except OSError:
        return None
    else:
        return st.st_mtime_ns, st.st_size
