"""Building of the group tree for a list of commands.

The tree is derived from scratch each time it is needed. A `GroupNode` is
identified only by its path of segments from the root, never by object
identity, because nodes do not survive from one build to the next.
"""
from __future__ import annotations

import locale
import logging
import unicodedata
from typing import Iterable, Iterator, Sequence

from .commands import CommandRecord, GroupPath, join_group_path

logger = logging.getLogger(__name__)

# Latin letters that have no Unicode decomposition, mapped to the base letters
# they collate with. Applied after case folding.
BASE_LETTERS = str.maketrans({
    '\u00e6': 'ae',     # æ
    '\u00f0': 'd',      # ð
    '\u00f8': 'o',      # ø
    '\u00fe': 'th',     # þ
    '\u0111': 'd',      # đ
    '\u0127': 'h',      # ħ
    '\u0131': 'i',      # ı
    '\u0142': 'l',      # ł
    '\u0153': 'oe',     # œ
    '\u0167': 't',      # ŧ
})


class GroupNode:
    """A node in the group tree.

    @label:    The last segment of the path; empty for the root.
    @segments: The full path from the root.
    @groups:   Child groups, keyed by segment, in order of first encounter.
    @commands: Commands placed directly in this group, in input order.
    """

    def __init__(self, label: str = '', segments: GroupPath = ()):
        self.label = label
        self.segments = segments
        self.groups: dict[str, GroupNode] = {}
        self.commands: list[CommandRecord] = []

    @property
    def key(self) -> str:
        """The stable identity of this node."""
        return join_group_path(self.segments)

    def is_root(self) -> bool:
        """True if this is the root of the tree."""
        return not self.segments

    def add_group(self, segment: str) -> GroupNode:
        """Get the child group for a segment, creating it if necessary."""
        if segment not in self.groups:
            self.groups[segment] = GroupNode(
                segment, (*self.segments, segment))
        return self.groups[segment]

    def sorted_groups(self) -> list[GroupNode]:
        """The child groups in display order.

        Python's sort is stable, so groups that compare equal (for example
        'apple' and 'Apple') stay in order of first encounter.
        """
        return sorted(
            self.groups.values(), key=lambda g: group_sort_key(g.label))

    def find(self, segments: Sequence[str]) -> GroupNode | None:
        """Find the descendant node with the given path, if it exists."""
        node: GroupNode | None = self
        for segment in segments:
            node = node.groups.get(segment)
            if node is None:
                return None
        return node

    def walk(self) -> Iterator[GroupNode]:
        """Iterate over all descendant groups, in display order."""
        for group in self.sorted_groups():
            yield group
            yield from group.walk()

    def group_count(self) -> int:
        """The total number of groups below this node."""
        return sum(1 for _ in self.walk())

    def outline_repr(self, end='\n') -> str:
        """Format a simple outline representation of the tree.

        This is intended for test support. The exact format may change between
        releases.
        """
        s = []
        if not self.is_root():
            s.append(f'{"  " * (len(self.segments) - 1)}{self.label}/')
        pad = '  ' * len(self.segments)
        s.extend(f'{pad}{cmd.label}' for cmd in self.commands)
        s.extend(g.outline_repr(end='') for g in self.sorted_groups())
        return '\n'.join(s) + end

    def __repr__(self):
        return f'GroupNode({self.key!r})'


def group_sort_key(label: str) -> str:
    """Provide a sort key that ignores case and accents.

    Letters are reduced to their base forms, so 'Øl' sorts as 'ol'. The
    result is passed through the locale's collation transform, which only has
    an effect once `init_collation` has been called.
    """
    decomposed = unicodedata.normalize('NFKD', label.casefold())
    base = ''.join(c for c in decomposed if not unicodedata.combining(c))
    base = base.translate(BASE_LETTERS)
    return locale.strxfrm(base)


def init_collation(name: str = '') -> str:
    """Set the collation locale used to order groups.

    :name:
        The locale name. The default, an empty string, selects the user's
        locale from the environment.
    :return:
        The name of the collation locale in effect. If the requested locale
        is not available, the previous setting is kept.
    """
    try:
        return locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error as exc:
        logger.warning('Cannot use collation locale %r: %s', name, exc)
        return locale.setlocale(locale.LC_COLLATE)


def build_tree(records: Iterable[CommandRecord]) -> GroupNode:
    """Build a group tree from an ordered sequence of commands.

    This never fails. Commands without a (usable) group are placed directly in
    the root; every other command is placed in the group at the end of its
    path, with intermediate groups created as necessary.
    """
    root = GroupNode()
    for cmd in records:
        node = root
        for segment in cmd.path:
            node = node.add_group(segment)
        node.commands.append(cmd)
    return root
