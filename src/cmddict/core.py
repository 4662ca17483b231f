"""Program to insert configured text snippets into files being edited."""
from __future__ import annotations

import argparse
import itertools
import logging
import sys
from functools import partial
from pathlib import Path
from typing import ClassVar, Iterator, cast

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.logging import TextualHandler
from textual.widgets import Footer, Header, TabbedContent, TabPane

from .grouping import init_collation
from .insertion import NoActiveEditor, insert_text
from .platform import terminal_title
from .projection import TreeProjection
from .settings import (
    Settings, SettingsMonitor, load_default_commands, standard_layers)
from .widgets import CommandTree, EditorArea

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class StartupError(Exception):
    """Error raised when cmddict cannot start."""


class CommandDictionary(App):
    """The textual application object."""

    CSS_PATH = 'cmddict.css'
    TITLE = 'Command dictionary'
    BINDINGS: ClassVar[list[Binding]] = [
        Binding('ctrl+r', 'refresh_commands', 'Refresh', priority=True),
        Binding('ctrl+n', 'new_buffer', 'New buffer', priority=True),
        Binding('ctrl+s', 'save_buffer', 'Save', priority=True),
        Binding('ctrl+q', 'quit', 'Quit', priority=True),
    ]
    pane_ids: ClassVar[Iterator[int]] = itertools.count(1)

    def __init__(self, args: argparse.Namespace):
        super().__init__()
        self.args = args
        for path in args.files:
            if path.is_dir():
                msg = f'Cannot edit {path}: it is a directory'
                raise StartupError(msg)
        self.settings = make_settings(args)
        self.projection = TreeProjection(self.settings.commands)
        self.monitor = SettingsMonitor(
            self.settings.paths, interval=args.poll_interval)
        self.scratch_count = 0

    def run(self, *args, **kwargs):                          # pragma: no cover
        """Wrap the standard run method, setting the terminal title."""
        with terminal_title(self.TITLE):
            return super().run(*args, **kwargs)

    def compose(self) -> ComposeResult:
        """Build the widget hierarchy."""
        yield Header()
        with Horizontal(id='main'):
            yield CommandTree(self.projection, id='commands')
            with TabbedContent(id='editors'):
                for path in self.args.files:
                    yield self.make_pane(path)
        yield Footer()

    def on_mount(self) -> None:
        """Start watching for settings changes."""
        self.monitor.start_monitoring(self.projection.refresh)
        self.query_one(CommandTree).focus()

    async def on_unmount(self) -> None:
        """Clean up when exiting the application."""
        await self.monitor.stop_monitoring()

    def make_pane(self, path: Path) -> TabPane:
        """Create a tab pane holding an editor for a file."""
        uid = next(self.pane_ids)
        return TabPane(
            path.name, EditorArea(path, id=f'editor-{uid}'),
            id=f'pane-{uid}')

    @property
    def active_editor(self) -> EditorArea | None:
        """The editor in the currently shown tab, if any."""
        tabs = self.query_one(TabbedContent)
        pane = tabs.active_pane
        if pane is None:
            return None
        editors = pane.query(EditorArea)
        return editors.first() if editors else None

    def on_command_tree_command_chosen(
            self, message: CommandTree.CommandChosen) -> None:
        """Insert a chosen command into the active editor."""
        editor = self.active_editor
        try:
            insert_text(editor, message.leaf.payload)
        except NoActiveEditor as exc:
            self.notify(str(exc), severity='information')
        else:
            cast(EditorArea, editor).focus()

    def action_refresh_commands(self) -> None:
        """Redisplay the commands from the current settings."""
        self.projection.refresh()

    async def action_new_buffer(self) -> None:
        """Open a new, empty, editor buffer.

        The buffer's file name is chosen so that it does not name an existing
        file.
        """
        path = self.scratch_path()
        pane = self.make_pane(path)
        tabs = self.query_one(TabbedContent)
        await tabs.add_pane(pane)
        tabs.active = cast(str, pane.id)

    def scratch_path(self) -> Path:
        """Choose an unused file name for a new buffer."""
        while True:
            self.scratch_count += 1
            path = Path(f'untitled-{self.scratch_count}.txt')
            if not path.exists():
                return path

    def action_save_buffer(self) -> None:
        """Save the active editor's text to its file."""
        editor = self.active_editor
        if editor is None:
            self.notify('There is no buffer to save.', severity='warning')
            return
        try:
            editor.save()
        except OSError as exc:
            logger.error('Could not save %s: %s', editor.path, exc)
            self.notify(
                f'Could not save {editor.path}: {exc.strerror}',
                severity='error')
        else:
            self.notify(f'Saved {editor.path}')


def make_settings(args: argparse.Namespace) -> Settings:
    """Create the settings from the command line arguments."""
    layers = standard_layers(
        cwd=args.project_dir, workspace=args.workspace)
    return Settings(
        layers, load_default_commands(args.defaults), language=args.language)


def init_logging(
        log_file: Path | None = None, *, debug: bool = False) -> None:
    """Set up logging.

    Log records go to the Textual devtools console and, optionally, to a file.
    """
    handlers: list[logging.Handler] = [TextualHandler()]
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers, force=True)


def parse_args(sys_args: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line arguments."""
    parser = argparse.ArgumentParser(
        description='Insert configured text snippets into files.')
    parser.add_argument(
        'files', nargs='*', type=Path,
        help='Files to open for editing.')
    parser.add_argument(
        '--project-dir', type=Path,
        help='The directory holding project settings (default: current).')
    parser.add_argument(
        '--workspace', type=Path,
        help='The workspace settings file (default: .cmddict.json).')
    parser.add_argument(
        '--language',
        help='Use language specific settings for this language.')
    parser.add_argument(
        '--defaults', type=Path,
        help='An alternative file of default commands.')
    parser.add_argument('--log', type=Path, help='Write log to this file.')
    parser.add_argument(
        '--debug', action='store_true', help='Enable debug logging.')

    # This is used by testing to detect settings changes quickly.
    add_hidden_arg = partial(parser.add_argument, help=argparse.SUPPRESS)
    add_hidden_arg('--poll-interval', type=float, default=0.5)
    if sys_args is None:
        sys_args = sys.argv[1:]
    return parser.parse_args(sys_args)


def main():                                                  # pragma: no cover
    """Run the application."""
    args = parse_args()
    init_logging(args.log, debug=args.debug)
    init_collation()
    try:
        app = CommandDictionary(args)
    except StartupError as exc:
        sys.exit(str(exc))
    app.run()
