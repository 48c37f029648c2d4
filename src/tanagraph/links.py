"""Link resolution from node ids to Markdown wiki links."""

import logging
from typing import Optional

from .context import ConversionContext
from .models import GraphNode, TopLevelEntry

logger = logging.getLogger(__name__)

UNRESOLVED_LINK = '[[#]]'


class LinkResolver:
    """Maps a node id to the text that should stand in for it.

    - top-level node -> [[Title]]
    - url node -> the raw URL
    - node inside some document -> [[Title#^anchor]]
    - anything else -> [[#]] and a notice
    """

    def __init__(self, context: ConversionContext):
        self.context = context

    def link(self, node_id: str, alias: Optional[str] = None) -> str:
        entry = self.context.top_level.get(node_id)
        if entry is not None:
            return self._wikilink(entry.title, alias)

        target = self.context.store.get(node_id)
        if target is not None:
            if target.doc_type == 'url':
                self.context.mark_seen(target)
                return target.name or ''

            parent = self.find_top_level_parent(target)
            if parent is not None:
                return self._wikilink(parent.title + '#' + self.context.anchor_token(node_id), alias)

        self.context.notice(f"Unresolved link to node {node_id}", logging.WARNING)
        return UNRESOLVED_LINK

    def find_top_level_parent(self, node: GraphNode) -> Optional[TopLevelEntry]:
        """Walk owners up until one of them is a document."""
        visited = {node.id}
        owner = self.context.store.get(node.owner_id)
        while owner is not None and owner.id not in visited:
            entry = self.context.top_level.get(owner.id)
            if entry is not None:
                return entry
            visited.add(owner.id)
            owner = self.context.store.get(owner.owner_id)
        return None

    @staticmethod
    def _wikilink(target: str, alias: Optional[str]) -> str:
        if alias and alias != target:
            return f'[[{target}|{alias}]]'
        return f'[[{target}]]'
