"""Reachability diagnostics: reports nodes that were never converted."""

import logging
from typing import List, Optional

from .context import ConversionContext
from .models import GraphNode

logger = logging.getLogger(__name__)


class ReachabilityDiagnostics:
    """Finds orphans: nodes neither rendered nor intentionally skipped."""

    def __init__(self, context: ConversionContext):
        self.context = context
        self.settings = context.settings

    def is_exempt(self, node: GraphNode) -> bool:
        return (node.id.startswith(self.settings.system_id_prefix)
                or node.doc_type in self.settings.exempt_doc_types)

    def find_orphans(self) -> List[GraphNode]:
        return [
            node for node in self.context.store
            if node.id not in self.context.converted and not self.is_exempt(node)
        ]

    def report(self) -> List[str]:
        """Add the converted count and orphan paths to the notices.

        Returns the ids of every orphan, including those past the cap.
        """
        self.context.notice(f"Converted {len(self.context.converted)} nodes")

        orphans = self.find_orphans()
        cap = self.settings.max_reported_orphans
        for node in orphans[:cap]:
            self.context.notice("Found unconverted node: " + self.path_from_root(node))
        if len(orphans) > cap:
            self.context.notice(f"{len(orphans) - cap} more unconverted nodes not listed")

        return [node.id for node in orphans]

    def path_from_root(self, node: GraphNode) -> str:
        """Describe where a node lives by walking its owners.

        ``root > Workspace [id] > Child [id]`` when a root is reached, a
        leading ``?`` when the owner chain ends elsewhere.
        """
        segments = []
        visited = set()
        current: Optional[GraphNode] = node
        while current is not None and current.id not in visited:
            if self.context.is_root(current):
                return ' > '.join(['root'] + list(reversed(segments)))
            visited.add(current.id)
            segments.append(f'{current.name} [{current.id}]')
            current = self.context.store.get(current.owner_id)
        return ' > '.join(['?'] + list(reversed(segments)))
