"""A pull based view of the command tree, suitable for a tree widget.

The `TreeProjection` answers "what are the children of this item?" queries.
It never holds on to a tree. Each query reads the current commands, builds a
new tree and navigates to the requested item by its path. This means answers
always reflect the latest configuration.

Group headers have stable keys, derived from their paths, so that a UI can
match up items from one query with those of an earlier query. Command leaves
have no stable identity; duplicate labels are perfectly legal.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterator, Sequence, Union

from .commands import CommandRecord, GroupPath, join_group_path
from .grouping import GroupNode, build_tree

logger = logging.getLogger(__name__)

UNGROUPED_LABEL = 'Ungrouped'

# A joined path never starts with the separator, so this key cannot clash with
# any real group's key, including a group called 'Ungrouped'.
UNGROUPED_KEY = '/ungrouped'

CommandSource = Callable[[], Sequence[CommandRecord]]
RefreshCallback = Callable[[], None]


class GroupHeader:
    """An expandable item representing a group.

    @label:     The displayed name; the last segment of the path.
    @segments:  The group's full path. Empty for the 'Ungrouped' header.
    @ungrouped: True for the synthetic header that holds ungrouped commands.
    """

    expandable = True
    description = None
    payload = None

    def __init__(
            self, label: str, segments: GroupPath = (), *,
            ungrouped: bool = False):
        self.label = label
        self.segments = segments
        self.ungrouped = ungrouped

    @classmethod
    def for_group(cls, group: GroupNode) -> GroupHeader:
        """Create the header for a group node."""
        return cls(group.label, group.segments)

    @classmethod
    def for_ungrouped(cls) -> GroupHeader:
        """Create the synthetic 'Ungrouped' header."""
        return cls(UNGROUPED_LABEL, ungrouped=True)

    @property
    def key(self) -> str:
        """The identity of this header, stable across rebuilds."""
        if self.ungrouped:
            return UNGROUPED_KEY
        return join_group_path(self.segments)

    def __eq__(self, other: object):
        if not isinstance(other, GroupHeader):
            return NotImplemented
        return self.key == other.key and self.label == other.label

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f'GroupHeader({self.key!r})'


class CommandLeaf:
    """A terminal item representing a single command."""

    expandable = False
    key = None

    def __init__(self, record: CommandRecord):
        self.record = record

    @property
    def label(self) -> str:
        """The displayed label."""
        return self.record.label

    @property
    def description(self) -> str | None:
        """The optional subtitle, also used as the tooltip."""
        return self.record.description

    tooltip = description

    @property
    def payload(self) -> str:
        """The text to insert when this leaf is activated."""
        return self.record.insert_text

    def __eq__(self, other: object):
        if not isinstance(other, CommandLeaf):
            return NotImplemented
        return self.record == other.record

    def __hash__(self):
        return hash(self.record)

    def __repr__(self):
        return f'CommandLeaf({self.label!r})'


DisplayItem = Union[GroupHeader, CommandLeaf]


def leaves(records: Sequence[CommandRecord]) -> list[DisplayItem]:
    """Create a leaf item for each command, preserving order."""
    return [CommandLeaf(cmd) for cmd in records]


def headers(group: GroupNode) -> list[DisplayItem]:
    """Create header items for a node's child groups, in display order."""
    return [GroupHeader.for_group(g) for g in group.sorted_groups()]


class TreeProjection:
    """Exposes the command tree through a 'children of item' interface.

    :source:
        A function that returns the current, ordered, list of commands. It is
        called for every query.
    """

    def __init__(self, source: CommandSource):
        self.source = source
        self._subscribers: list[RefreshCallback] = []

    def build(self) -> GroupNode:
        """Build a fresh tree from the current commands."""
        return build_tree(self.source())

    def get_children(
            self, item: DisplayItem | None = None) -> list[DisplayItem]:
        """Provide the children of an item.

        :item:
            A `GroupHeader`, a `CommandLeaf` or ``None`` for the (hidden)
            root.
        :return:
            The items to display under the given item, in display order.
        """
        if isinstance(item, CommandLeaf):
            return []
        return self._children_of(self.build(), item)

    def walk_items(self) -> Iterator[tuple[int, DisplayItem]]:
        """Iterate over every reachable item, depth first.

        Each entry is a tuple of (depth, item), where top level items have a
        depth of 1. All items come from a single build of the tree.
        """
        def walk(item, depth):
            for child in self._children_of(tree, item):
                yield depth, child
                if isinstance(child, GroupHeader):
                    yield from walk(child, depth + 1)

        tree = self.build()
        yield from walk(None, 1)

    def subscribe(self, callback: RefreshCallback) -> RefreshCallback:
        """Register a function to be called on each refresh signal.

        :return:
            A function that cancels the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def refresh(self) -> None:
        """Signal subscribers that the tree should be redisplayed."""
        logger.debug(
            'Refresh signal to %d subscriber(s)', len(self._subscribers))
        for callback in list(self._subscribers):
            callback()

    @staticmethod
    def _children_of(
            tree: GroupNode, item: GroupHeader | None) -> list[DisplayItem]:
        if item is None:
            if not tree.groups:
                return leaves(tree.commands)
            items = headers(tree)
            if tree.commands:
                items.insert(0, GroupHeader.for_ungrouped())
            return items

        if item.ungrouped:
            return leaves(tree.commands)
        group = tree.find(item.segments)
        if group is None:
            logger.debug('Group %r no longer exists', item.key)
            return []
        return headers(group) + leaves(group.commands)
