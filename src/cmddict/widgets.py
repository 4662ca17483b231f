"""Application specific widgets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, TYPE_CHECKING

from rich.text import Text
from textual.message import Message
from textual.widgets import TextArea, Tree

from .projection import CommandLeaf, DisplayItem, GroupHeader, TreeProjection

if TYPE_CHECKING:
    from textual.widgets.tree import TreeNode

logger = logging.getLogger(__name__)


def item_label(item: DisplayItem) -> Text:
    """Create the displayed label for a tree item."""
    if isinstance(item, GroupHeader):
        return Text(item.label, style='bold')
    text = Text(item.label)
    if item.description:
        text.append(f'  {item.description}', style='dim')
    return text


class CommandTree(Tree[DisplayItem]):
    """A tree widget that displays the commands of a `TreeProjection`.

    The children of a group are only fetched when the group is first expanded.
    When the projection signals a refresh, the whole tree is rebuilt and the
    groups that were expanded are expanded again. Groups are matched using
    their keys, so a group stays open provided it still exists.
    """

    class CommandChosen(Message):
        """Posted when the user chooses a command to insert.

        :leaf: The `CommandLeaf` for the chosen command.
        """

        def __init__(self, leaf: CommandLeaf):
            super().__init__()
            self.leaf = leaf

    def __init__(self, projection: TreeProjection, **kwargs):
        super().__init__('Commands', **kwargs)
        self.projection = projection
        self._populated: set[TreeNode[DisplayItem]] = set()
        self._unsubscribe = None

    def on_mount(self) -> None:
        """Populate the top level and start listening for refreshes."""
        self.show_root = False
        self._unsubscribe = self.projection.subscribe(self.reload)
        self.reload()

    def on_unmount(self) -> None:
        """Stop listening for refreshes."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def walk_nodes(
            self, node: TreeNode[DisplayItem] | None = None,
        ) -> Iterator[TreeNode[DisplayItem]]:
        """Iterate, depth first, over all the current nodes."""
        node = node or self.root
        for child in node.children:
            yield child
            yield from self.walk_nodes(child)

    def expanded_keys(self) -> set[str]:
        """The keys of all the currently expanded groups."""
        return {
            node.data.key for node in self.walk_nodes()
            if isinstance(node.data, GroupHeader) and node.is_expanded}

    def find_node(self, key: str) -> TreeNode[DisplayItem] | None:
        """Find the node for the group with a given key."""
        for node in self.walk_nodes():
            if isinstance(node.data, GroupHeader) and node.data.key == key:
                return node
        return None

    def is_attached(self, node: TreeNode[DisplayItem]) -> bool:
        """Test if a node belongs to the current tree.

        Nodes from before the most recent reload may still be referenced by
        queued messages.
        """
        while node.parent is not None:
            node = node.parent
        return node is self.root

    def reload(self) -> None:
        """Rebuild the tree, preserving the expanded state of groups."""
        expanded = self.expanded_keys()
        logger.debug('Reloading tree, expanded=%s', sorted(expanded))
        self.clear()
        self._populated = set()
        self.populate(self.root, expanded)

    def populate(
            self, node: TreeNode[DisplayItem], expanded: set[str]) -> None:
        """Add the child nodes for a tree node.

        :expanded:
            Keys of groups that should be populated and expanded immediately.
        """
        self._populated.add(node)
        item = node.data if node is not self.root else None
        for child in self.projection.get_children(item):
            if isinstance(child, GroupHeader):
                child_node = node.add(item_label(child), data=child)
                if child.key in expanded:
                    self.populate(child_node, expanded)
                    child_node.expand()
            else:
                node.add_leaf(item_label(child), data=child)

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        """Fetch the children of a group the first time it is expanded."""
        node = event.node
        if node not in self._populated and self.is_attached(node):
            self.populate(node, set())

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        """Handle the user choosing a node."""
        item = event.node.data
        if isinstance(item, CommandLeaf):
            event.stop()
            self.post_message(self.CommandChosen(item))


class EditorArea(TextArea):
    """A text editor for a single file.

    :path: The file being edited. This need not exist yet.
    """

    def __init__(self, path: Path, **kwargs):
        try:
            text = path.read_text(encoding='utf8')
        except FileNotFoundError:
            text = ''
        super().__init__(text, **kwargs)
        self.path = path

    def save(self) -> None:
        """Write the current text to the file.

        :raise OSError: If the file cannot be written.
        """
        self.path.write_text(self.text, encoding='utf8')
        logger.info('Saved %s', self.path)
