"""Insertion of a command's text into an editor.

Each non-empty selection is replaced by the text and the text is inserted at
each empty selection (*i.e.* a plain cursor). All the changes are applied as
a single undoable edit.
"""
from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, TYPE_CHECKING

from textual.widgets.text_area import Selection

if TYPE_CHECKING:
    from textual.widgets import TextArea
    from textual.widgets.text_area import Location

logger = logging.getLogger(__name__)

NO_EDITOR_MESSAGE = 'Open a text editor to insert the command.'


class NoActiveEditor(Exception):
    """There is no editor that can accept inserted text."""

    def __init__(self, msg: str = NO_EDITOR_MESSAGE):
        super().__init__(msg)


class Edit(NamedTuple):
    """A single replacement of a region of text.

    An insertion is simply a replacement of an empty region.
    """

    start: Location
    end: Location
    text: str

    @property
    def is_insertion(self) -> bool:
        """True if this edit does not replace any text."""
        return self.start == self.end


def normalise(selection: Selection) -> Selection:
    """Order a selection's locations so that start is not after end."""
    start, end = selection
    return Selection(min(start, end), max(start, end))


def plan_edits(selections: Iterable[Selection], text: str) -> list[Edit]:
    """Work out the edits needed to insert text at each selection.

    The edits are ordered from the end of the document to its start so that
    applying each in turn does not move the locations of those still to be
    applied.
    """
    edits = [Edit(*normalise(sel), text) for sel in selections]
    return sorted(edits, key=lambda e: e.start, reverse=True)


def editor_selections(editor: TextArea) -> list[Selection]:
    """Get the current selections of an editor."""
    return [editor.selection]


def insert_text(editor: TextArea | None, text: str) -> None:
    """Insert (or replace selections with) text in an editor.

    :editor:
        The active editor or ``None`` if there is no active editor.
    :text:
        The text to insert, used verbatim.
    :raise NoActiveEditor:
        If there is no editor or the editor is read-only.
    """
    if editor is None or editor.read_only:
        raise NoActiveEditor

    edits = plan_edits(editor_selections(editor), text)
    editor.history.checkpoint()
    end: Location | None = None
    for edit in edits:
        result = editor.replace(
            edit.text, edit.start, edit.end, maintain_selection_offset=False)
        end = result.end_location
    editor.history.checkpoint()
    if end is not None:
        editor.selection = Selection.cursor(end)
    logger.debug(
        'Inserted %d characters at %d location(s)', len(text), len(edits))
