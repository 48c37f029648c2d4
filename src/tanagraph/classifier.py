"""Structural classification: decides which nodes become documents."""

import logging
from typing import Optional

from .context import ConversionContext
from .models import EdgeKind, GraphNode

logger = logging.getLogger(__name__)


class StructuralClassifier:
    """Locates the workspace, system subtrees, library and journal.

    Fills the TopLevelIndex and marks container nodes as converted. System
    subtrees are swept as seen without being rendered.
    """

    def __init__(self, context: ConversionContext):
        self.context = context
        self.settings = context.settings
        self.store = context.store

    def classify(self):
        """Classify every root marker found in the store."""
        self.context.roots = self.store.find_roots(self.settings.root_name_prefix)
        for root in self.context.roots:
            self.classify_root(root)
        return self.context.top_level

    def classify_root(self, root: GraphNode):
        self.context.converted.add(root.id)

        workspace = self.find_workspace(root)
        if workspace is not None:
            self.import_workspace(workspace)
        else:
            self.context.notice(f"Workspace node not found under {root.name}", logging.WARNING)

        for suffix in self.settings.special_suffixes:
            special_node = self.store.get(root.id + suffix)
            if special_node is not None:
                self.context.mark_seen(special_node)
            else:
                self.context.notice(f"Special node {suffix} not found", logging.WARNING)

        library_node = self.store.get(root.id + self.settings.library_suffix)
        if library_node is not None:
            self.import_library(library_node)
        else:
            self.context.notice("Library node not found")

        if workspace is not None:
            for edge in self.context.children(workspace):
                if edge.kind is EdgeKind.OWNED and edge.child.doc_type == 'journal':
                    self.import_daily_notes(edge.child)
                    break

    def find_workspace(self, root: GraphNode) -> Optional[GraphNode]:
        """The workspace is the root's first listed child."""
        for child_id in root.children:
            if self.store.is_system_child(child_id):
                continue
            return self.store.get(child_id)
        return None

    def import_workspace(self, workspace: GraphNode):
        self.context.converted.add(workspace.id)
        self.context.register_top_level(workspace)

        # Workspace properties are never rendered
        meta_node = self.store.get(workspace.meta_node_id)
        if meta_node is not None:
            self.context.mark_seen(meta_node)

    def import_library(self, library_node: GraphNode):
        """Every library item becomes its own document."""
        self.context.converted.add(library_node.id)
        for edge in self.context.children(library_node):
            self.context.register_top_level(edge.child)

    def import_daily_notes(self, journal: GraphNode):
        """Register day nodes below journal > year > week as documents."""
        self.context.converted.add(journal.id)
        for year_edge in self.context.children(journal):
            year_node = year_edge.child
            self.context.converted.add(year_node.id)
            for week_edge in self.context.children(year_node):
                week_node = week_edge.child
                self.context.converted.add(week_node.id)
                for day_edge in self.context.children(week_node):
                    if day_edge.child.name:
                        self.context.register_top_level(day_edge.child)
