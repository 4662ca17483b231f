"""The command records that make up a command dictionary."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple

GroupPath = Tuple[str, ...]
GROUP_SEPARATOR = '/'


@dataclass(frozen=True)
class CommandRecord:
    """A single configured snippet.

    @label:       The text displayed for the command.
    @insert_text: The text inserted into the editor.
    @description: An optional subtitle.
    @group:       An optional, slash separated, group path.
    """

    label: str
    insert_text: str
    description: str | None = None
    group: str | None = None

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> CommandRecord:
        """Create a record from a settings entry.

        The entry must already have passed `is_command_config`. Optional values
        that are not strings are quietly treated as absent.
        """
        return cls(
            label=entry['label'],
            insert_text=entry['insertText'],
            description=_optional_str(entry.get('description')),
            group=_optional_str(entry.get('group')))

    @property
    def path(self) -> GroupPath:
        """The parsed group path for this command."""
        return parse_group_path(self.group)

    def __repr__(self):
        return f'Command({self.label!r})'


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def parse_group_path(group: str | None) -> GroupPath:
    """Split a group string into a tuple of path segments.

    Segments are stripped of surrounding white space and empty segments are
    discarded, so 'A//B/' and 'A/B' are the same path. A missing or blank
    group gives the empty path.
    """
    if not group:
        return ()
    parts = (part.strip() for part in group.split(GROUP_SEPARATOR))
    return tuple(part for part in parts if part)


def join_group_path(segments: Iterable[str]) -> str:
    """Join path segments back into a group string."""
    return GROUP_SEPARATOR.join(segments)


def is_command_config(value: object) -> bool:
    """Test if a raw settings value has the minimal shape of a command."""
    if not isinstance(value, Mapping):
        return False
    return (
        isinstance(value.get('label'), str)
        and isinstance(value.get('insertText'), str))


def commands_from_config(entries: Iterable[object]) -> list[CommandRecord]:
    """Convert raw settings entries to records.

    Entries that do not look like commands are dropped.
    """
    return [
        CommandRecord.from_config(entry) for entry in entries
        if is_command_config(entry)]
