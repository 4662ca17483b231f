"""Insertion of command text into an editor."""
from __future__ import annotations

import pytest
from textual.app import App, ComposeResult
from textual.widgets import TextArea
from textual.widgets.text_area import Selection

from cmddict.insertion import (
    NO_EDITOR_MESSAGE, Edit, NoActiveEditor, insert_text, normalise,
    plan_edits)


class EditorApp(App):
    """A minimal application holding a single text area."""

    def __init__(self, text: str, *, read_only: bool = False):
        super().__init__()
        self.initial_text = text
        self.read_only = read_only

    def compose(self) -> ComposeResult:
        yield TextArea(self.initial_text, read_only=self.read_only)


class TestPlanning:
    """Working out the edits for a set of selections."""

    def test_normalise_reversed_selection(self):
        """A selection made backwards is put into document order."""
        assert normalise(Selection((2, 5), (1, 0))) == Selection(
            (1, 0), (2, 5))
        assert normalise(Selection((1, 0), (1, 0))) == Selection(
            (1, 0), (1, 0))

    def test_edits_are_applied_from_the_end(self):
        """Later edits come first so earlier locations remain valid."""
        edits = plan_edits([
            Selection((0, 1), (0, 1)),
            Selection((3, 4), (2, 0)),
            Selection((1, 2), (1, 2)),
        ], 'X')
        assert edits == [
            Edit((2, 0), (3, 4), 'X'),
            Edit((1, 2), (1, 2), 'X'),
            Edit((0, 1), (0, 1), 'X'),
        ]

    def test_cursor_is_an_insertion(self):
        """An empty selection gives a pure insertion."""
        edit, = plan_edits([Selection.cursor((0, 3))], 'abc')
        assert edit.is_insertion
        edit, = plan_edits([Selection((0, 0), (0, 3))], 'abc')
        assert not edit.is_insertion


class TestNoEditor:
    """Insertion requires a writable editor."""

    def test_no_editor(self):
        """Without an editor, the user is told to open one."""
        with pytest.raises(NoActiveEditor) as exc_info:
            insert_text(None, 'text')
        assert str(exc_info.value) == NO_EDITOR_MESSAGE

    @pytest.mark.asyncio
    async def test_read_only_editor(self):
        """A read-only editor is treated as no editor."""
        app = EditorApp('hello', read_only=True)
        async with app.run_test():
            editor = app.query_one(TextArea)
            with pytest.raises(NoActiveEditor):
                insert_text(editor, 'text')
            assert editor.text == 'hello'


@pytest.mark.asyncio
async def test_insert_at_cursor():
    """Text is inserted at the cursor, which moves to after the text."""
    app = EditorApp('hello world')
    async with app.run_test() as pilot:
        editor = app.query_one(TextArea)
        editor.selection = Selection.cursor((0, 5))
        insert_text(editor, ',')
        await pilot.pause()
        assert editor.text == 'hello, world'
        assert editor.selection == Selection.cursor((0, 6))


@pytest.mark.asyncio
async def test_selection_is_replaced():
    """A non-empty selection is replaced by the text."""
    app = EditorApp('print(x)\n')
    async with app.run_test() as pilot:
        editor = app.query_one(TextArea)
        editor.selection = Selection((0, 8), (0, 0))
        insert_text(editor, 'logger.info(x)')
        await pilot.pause()
        assert editor.text == 'logger.info(x)\n'
        assert editor.selection == Selection.cursor((0, 14))


@pytest.mark.asyncio
async def test_multi_line_text_is_inserted_verbatim():
    """Newlines in the text are preserved; the cursor ends after the text."""
    app = EditorApp('ab')
    async with app.run_test() as pilot:
        editor = app.query_one(TextArea)
        editor.selection = Selection.cursor((0, 1))
        insert_text(editor, 'one\ntwo\n  three')
        await pilot.pause()
        assert editor.text == 'aone\ntwo\n  threeb'
        assert editor.selection == Selection.cursor((2, 7))


@pytest.mark.asyncio
async def test_insertion_can_be_undone():
    """The insertion is a single undoable edit."""
    app = EditorApp('hello')
    async with app.run_test() as pilot:
        editor = app.query_one(TextArea)
        editor.selection = Selection.cursor((0, 5))
        insert_text(editor, ' there')
        await pilot.pause()
        assert editor.text == 'hello there'
        editor.undo()
        await pilot.pause()
        assert editor.text == 'hello'
