"""
Tana graph to Markdown converter

Converts one or more Tana JSON exports into standalone Markdown documents.
- Workspace, library items and daily notes -> one document each
- Owned children -> nested bullet outline inside their owner's document
- Children listed elsewhere -> [[links]], anchored with ^block-ids
- Tuples -> property block at the top of a document
- Every node is either converted, deliberately skipped or reported
"""

import logging
from typing import Callable, Optional

from .anchors import collect_anchors
from .classifier import StructuralClassifier
from .context import ConversionContext
from .diagnostics import ReachabilityDiagnostics
from .exceptions import ConversionError
from .models import ConversionProgress, ConversionResult, ConversionSettings
from .renderer import DocumentRenderer
from .store import NodeStore

logger = logging.getLogger(__name__)


class TanaGraphConverter:
    def __init__(
        self,
        settings: Optional[ConversionSettings] = None,
        progress_callback: Optional[Callable[[ConversionProgress], None]] = None,
    ):
        self.settings = settings or ConversionSettings()
        self.progress_callback = progress_callback

    def report_progress(self, phase: str, current: int = 0, total: int = 0, message: str = ""):
        """Send progress update to the caller."""
        if self.progress_callback:
            self.progress_callback(ConversionProgress(phase, current, total, message))

    def load(self, *sources: str) -> ConversionContext:
        """Parse every source into one shared store."""
        self.report_progress("Loading", message=f"Loading {len(sources)} source(s)...")
        store = NodeStore(self.settings.system_child_prefix).load(*sources)
        context = ConversionContext(store, self.settings)
        for node_id in store.duplicates:
            context.notice(f"Duplicate node id {node_id} ignored")
        self.report_progress("Loading", message=f"Loaded {len(store)} nodes")
        return context

    def run(self, *sources: str) -> ConversionResult:
        """Convert the given export blobs.

        Fatal errors never escape: they are returned as an unsuccessful
        result without documents.
        """
        context = None
        try:
            context = self.load(*sources)

            # Phase 1: anchors must be known before anything is rendered
            self.report_progress("Indexing", message="Collecting anchors...")
            collect_anchors(context)

            # Phase 2: pick the documents
            self.report_progress("Classifying", message="Locating workspace, library and journal...")
            StructuralClassifier(context).classify()
            total = len(context.top_level)
            self.report_progress("Classifying", total, total, f"Found {total} documents")

            # Phase 3: render
            renderer = DocumentRenderer(context)
            documents = []
            for idx, entry in enumerate(list(context.top_level.values())):
                documents.append(renderer.render_document(entry))
                if (idx + 1) % 100 == 0:
                    self.report_progress("Rendering", idx + 1, total, f"Rendered {idx + 1} documents...")
            self.report_progress("Rendering", total, total, f"Rendered {total} documents")

            # Phase 4: account for everything else
            self.report_progress("Diagnostics", message="Checking for unconverted nodes...")
            orphans = ReachabilityDiagnostics(context).report()

            self.report_progress("Complete", total, total, "Conversion complete!")

            return ConversionResult(
                success=True,
                documents=documents,
                notices=list(context.notices),
                converted_count=len(context.converted),
                orphans=orphans,
            )

        except ConversionError as e:
            logger.error("Conversion failed: %s", e)
            notices = list(context.notices) if context is not None else []
            return ConversionResult(success=False, notices=notices, error_message=str(e))
        except Exception as e:
            logger.exception("Unexpected error during conversion")
            notices = list(context.notices) if context is not None else []
            return ConversionResult(success=False, notices=notices, error_message=f"Unexpected error: {str(e)}")
