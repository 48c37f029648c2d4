"""Per-run conversion state shared by the pipeline components."""

import logging
from typing import Dict, List, Optional, Set

from .markup import clean_node_name, sanitize_filename
from .models import ConversionSettings, Edge, EdgeKind, GraphNode, TopLevelEntry
from .store import NodeStore

logger = logging.getLogger(__name__)


class ConversionContext:
    """Everything one conversion run knows about the graph.

    Holds the node store plus the ConvertedSet, AnchorSet and TopLevelIndex.
    A context is created per run and never reused.
    """

    def __init__(self, store: NodeStore, settings: Optional[ConversionSettings] = None):
        self.store = store
        self.settings = settings or ConversionSettings()

        self.converted: Set[str] = set()  # rendered or intentionally skipped
        self.anchors: Set[str] = set()  # ids needing a block anchor
        self.top_level: Dict[str, TopLevelEntry] = {}  # node_id -> entry
        self.notices: List[str] = []
        self.roots: List[GraphNode] = []
        self.used_titles: Dict[str, str] = {}  # lowercased title -> node_id

    def notice(self, message: str, level: int = logging.INFO):
        """Record a non-fatal notice for the caller."""
        self.notices.append(message)
        logger.log(level, message)

    def is_root(self, node: GraphNode) -> bool:
        return any(root.id == node.id for root in self.roots)

    def children(self, node: GraphNode) -> List[Edge]:
        """Return the listed children of a node as typed edges.

        System ids are skipped; ids missing from the store are reported.
        """
        edges = []
        for child_id in node.children:
            if self.store.is_system_child(child_id):
                continue
            child = self.store.get(child_id)
            if child is None:
                parent_label = node.name if node.name is not None else node.id
                self.notice(f"Node with id {child_id} (parent {parent_label}) not found")
                continue
            kind = EdgeKind.OWNED if node.owns(child) else EdgeKind.REFERENCED
            edges.append(Edge(kind, node, child))
        return edges

    def mark_seen(self, node: GraphNode):
        """Mark a node and everything hanging off it as converted.

        Follows children, the meta node and associated nodes.
        """
        stack = [node]
        while stack:
            current = stack.pop()
            if current.id in self.converted:
                continue
            self.converted.add(current.id)

            pending = [edge.child for edge in self.children(current)]
            meta = self.store.get(current.meta_node_id)
            if meta is not None:
                pending.append(meta)
            pending.extend(self._associated(current))

            # Reversed so nodes are visited in source order
            stack.extend(reversed(pending))

    def mark_associated_seen(self, node: GraphNode):
        for associated in self._associated(node):
            self.mark_seen(associated)

    def _associated(self, node: GraphNode) -> List[GraphNode]:
        associated = []
        for associated_id in node.association_map.values():
            target = self.store.get(associated_id)
            if target is not None:
                associated.append(target)
        return associated

    def register_top_level(self, node: GraphNode) -> TopLevelEntry:
        """Add a node to the TopLevelIndex under a unique, file-safe title."""
        if node.id in self.top_level:
            return self.top_level[node.id]

        base_title = sanitize_filename(clean_node_name(node.name or ''))
        title = base_title
        counter = 2
        while title.lower() in self.used_titles:
            title = f'{base_title} ({counter})'
            counter += 1
        self.used_titles[title.lower()] = node.id

        entry = TopLevelEntry(node, title)
        self.top_level[node.id] = entry
        return entry

    def anchor_token(self, node_id: str) -> str:
        return '^' + node_id.replace('_', '-')
