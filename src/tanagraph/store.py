"""Node store: parses export blobs into one id -> node table."""

import json
import logging
from typing import Dict, Iterator, List, Optional

from .exceptions import InvalidExportError, RootNodeNotFound
from .models import Edge, EdgeKind, GraphNode

logger = logging.getLogger(__name__)


class NodeStore:
    """Arena holding every node of every loaded export.

    All sources must be loaded before classification starts, since
    references between files are resolved by id alone.
    """

    def __init__(self, system_child_prefix: str = 'SYS_'):
        self.system_child_prefix = system_child_prefix
        self.nodes: Dict[str, GraphNode] = {}
        self.format_versions: List[int] = []
        self.duplicates: List[str] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes.values())

    def get(self, node_id: Optional[str]) -> Optional[GraphNode]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def load(self, *sources: str) -> 'NodeStore':
        """Parse each JSON blob and add its nodes to the table."""
        for index, data in enumerate(sources):
            try:
                database = json.loads(data)
            except json.JSONDecodeError as e:
                raise InvalidExportError(f"Invalid JSON in source {index + 1}: {e}")
            if not isinstance(database, dict):
                raise InvalidExportError(f"Source {index + 1} is not a JSON object")

            self.format_versions.append(database.get('formatVersion'))
            for doc in database.get('docs') or []:
                if not isinstance(doc, dict) or 'id' not in doc:
                    continue
                node = GraphNode.from_dict(doc)
                if node.id in self.nodes:
                    # First occurrence wins
                    self.duplicates.append(node.id)
                    continue
                self.nodes[node.id] = node

        logger.debug("Loaded %d nodes from %d source(s)", len(self.nodes), len(sources))
        return self

    def find_roots(self, prefix: str) -> List[GraphNode]:
        """Return every root marker node, in load order."""
        roots = [n for n in self.nodes.values() if n.name and n.name.startswith(prefix)]
        if not roots:
            raise RootNodeNotFound("Root node not found")
        return roots

    def is_system_child(self, child_id: str) -> bool:
        return child_id.startswith(self.system_child_prefix)

    def edges(self, node: GraphNode) -> Iterator[Edge]:
        """Yield typed edges to every resolvable child and associated node.

        System ids in children lists are skipped and dangling ids are
        silently ignored; use ``ConversionContext.children`` to have them
        reported.
        """
        for child_id in node.children:
            if self.is_system_child(child_id):
                continue
            child = self.nodes.get(child_id)
            if child is None:
                continue
            kind = EdgeKind.OWNED if node.owns(child) else EdgeKind.REFERENCED
            yield Edge(kind, node, child)

        for associated_id in node.association_map.values():
            associated = self.nodes.get(associated_id)
            if associated is not None:
                yield Edge(EdgeKind.ASSOCIATED, node, associated)
