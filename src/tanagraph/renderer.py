"""Renders top-level nodes into Markdown documents."""

import logging
from typing import List, Set, Tuple

from .context import ConversionContext
from .links import LinkResolver
from .markup import MarkupTranslator, clean_node_name, format_property, safe_tag
from .models import Document, EdgeKind, GraphNode, TopLevelEntry

logger = logging.getLogger(__name__)


class DocumentRenderer:
    """Turns each TopLevelIndex entry into one document.

    Owned children are inlined as a nested bullet outline. Children listed
    under a node that does not own them are rendered as links, so shared
    content appears inline exactly once.
    """

    def __init__(self, context: ConversionContext, resolver: LinkResolver = None):
        self.context = context
        self.settings = context.settings
        self.store = context.store
        self.resolver = resolver or LinkResolver(context)
        self.markup = MarkupTranslator(self.resolver.link)

    def render_document(self, entry: TopLevelEntry) -> Document:
        fragments: List[str] = []

        properties = self.collect_properties(entry.node)
        if properties:
            fragments.append('---')
            for key, values in properties:
                fragments.append(format_property(key, values))
            fragments.append('---')

        self.render_node(entry.node, fragments, 0, set())

        filename = entry.title + self.settings.file_extension
        return Document(filename, '\n'.join(fragments))

    def collect_properties(self, node: GraphNode) -> List[Tuple[str, List[str]]]:
        """Read (name, values) pairs from the node's tuple children."""
        properties = []
        for edge in self.store.edges(node):
            tuple_node = edge.child
            if edge.kind is EdgeKind.ASSOCIATED or tuple_node.doc_type != 'tuple':
                continue
            if len(tuple_node.children) < 2:
                continue

            prop_node = self.store.get(tuple_node.children[0])
            value_nodes = [self.store.get(v) for v in tuple_node.children[1:]]
            value_nodes = [v for v in value_nodes if v is not None]
            if prop_node is None or not value_nodes:
                continue

            key = clean_node_name(prop_node.name or '') or prop_node.id
            values = [self.markup.translate(v.name) for v in value_nodes]
            properties.append((key, values))
        return properties

    def read_meta(self, node: GraphNode) -> Tuple[List[str], bool]:
        """Return (tags, is_checklist_item) from a node's meta node."""
        meta_node = self.store.get(node.meta_node_id)
        if meta_node is None:
            return [], False
        self.context.mark_seen(meta_node)

        tags = []
        checkbox = False
        for edge in self.store.edges(meta_node):
            tuple_node = edge.child
            if tuple_node.doc_type != 'tuple' or not tuple_node.children:
                continue
            property_id = tuple_node.children[0]
            value_ids = tuple_node.children[1:]

            if property_id == self.settings.tag_property_id:
                for value_id in value_ids:
                    tag_node = self.store.get(value_id)
                    if tag_node is None or not tag_node.name:
                        continue
                    tag = safe_tag(tag_node.name)
                    if tag and tag not in tags:
                        tags.append(tag)
            elif property_id == self.settings.checkbox_property_id:
                checkbox = self.settings.checkbox_off_value_id not in value_ids
        return tags, checkbox

    def render_node(self, node: GraphNode, fragments: List[str], indent: int, rendering: Set[str]):
        """Append the outline for ``node`` and its owned subtree."""
        if node.doc_type == 'journal':
            return
        if node.doc_type == 'tuple':
            self.context.mark_seen(node)
            return

        self.context.converted.add(node.id)
        tags, checkbox = self.read_meta(node)
        self.context.mark_associated_seen(node)

        if indent == 0:
            if tags:
                fragments.append(' '.join('#' + tag for tag in tags))
            if node.description:
                fragments.append(self.markup.translate(node.description))
        else:
            fragments.append(self.format_bullet(node, indent, tags, checkbox))

        # Ids on the current render path
        rendering.add(node.id)
        for edge in self.context.children(node):
            child = edge.child
            if child.doc_type == 'tuple':
                self.context.mark_seen(child)
            elif (edge.kind is EdgeKind.OWNED
                  and child.id not in self.context.top_level
                  and child.id not in rendering):
                self.render_node(child, fragments, indent + 1, rendering)
            else:
                fragments.append(self.bullet_prefix(indent + 1) + self.resolver.link(child.id))
        rendering.discard(node.id)

    def format_bullet(self, node: GraphNode, indent: int, tags: List[str], checkbox: bool) -> str:
        checkbox_mark = ''
        if checkbox:
            checkbox_mark = '[x] ' if node.done else '[ ] '
        heading = '### ' if node.flags & self.settings.heading_flag else ''
        tag_text = ''.join(' #' + tag for tag in tags)
        anchor = ''
        if node.id in self.context.anchors:
            anchor = ' ' + self.context.anchor_token(node.id)

        return (self.bullet_prefix(indent) + checkbox_mark + heading
                + self.markup.translate(node.name) + tag_text + anchor)

    @staticmethod
    def bullet_prefix(indent: int) -> str:
        return '  ' * (indent - 1) + '- '
