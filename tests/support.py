"""Common test support code."""
from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

from cmddict.commands import CommandRecord


def clean_text_lines(text: str) -> list[str]:
    """Dedent and remove leading and trailing blank lines from text."""
    lines = [line.rstrip() for line in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return textwrap.dedent('\n'.join(lines)).splitlines()


def clean_text(text: str) -> str:
    """Dedent and remove unwanted blank lines from text."""
    return '\n'.join(clean_text_lines(text)) + '\n'


def cmd(label: str, group: str | None = None, **kwargs) -> CommandRecord:
    """Create a command record with a default insert text."""
    insert_text = kwargs.pop('insert_text', f'{label.lower()}();')
    return CommandRecord(label, insert_text, group=group, **kwargs)


def entry(label: str, group: str | None = None, **kwargs) -> dict[str, Any]:
    """Create a raw settings entry for a command."""
    d: dict[str, Any] = {
        'label': label,
        'insertText': kwargs.pop('insertText', f'{label.lower()}();'),
    }
    if group is not None:
        d['group'] = group
    d.update(kwargs)
    return d


def write_settings(
        path: Path, commands: Any = None, *,
        languages: dict[str, Any] | None = None,
        raw: str | None = None) -> Path:
    """Write a settings file.

    :commands:  The value for the commands key. Not written if ``None``.
    :languages: A mapping from language name to commands value.
    :raw:       If provided, this text is written instead.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if raw is None:
        data: dict[str, Any] = {}
        if commands is not None:
            data['commandDictionary.commands'] = commands
        for language, value in (languages or {}).items():
            data[f'[{language}]'] = {'commandDictionary.commands': value}
        raw = json.dumps(data, indent=2)
    path.write_text(raw, encoding='utf8')
    return path


def labels(items) -> list[str]:
    """Get the labels of a list of display items."""
    return [item.label for item in items]
