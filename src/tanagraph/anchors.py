"""Anchor prepass: finds nodes that will be linked to from elsewhere."""

import logging
from typing import Set

from .context import ConversionContext
from .markup import inline_reference_ids
from .models import EdgeKind

logger = logging.getLogger(__name__)


def collect_anchors(context: ConversionContext) -> Set[str]:
    """Fill ``context.anchors`` with every id that needs a block anchor.

    A node needs an anchor when it is listed under a node that does not own
    it, or when some node's name references it inline. Only these nodes get
    an anchor token, which keeps the output terse for the common case.
    """
    for node in context.store:
        context.anchors.update(inline_reference_ids(node.name))
        context.anchors.update(inline_reference_ids(node.description))

        for edge in context.store.edges(node):
            if edge.kind is EdgeKind.REFERENCED:
                context.anchors.add(edge.child.id)

    logger.debug("Found %d anchored nodes", len(context.anchors))
    return context.anchors
