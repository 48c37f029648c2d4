from .models import (
    GraphNode,
    EdgeKind,
    Edge,
    TopLevelEntry,
    Document,
    ConversionSettings,
    ConversionProgress,
    ConversionResult,
)
from .exceptions import ConversionError, InvalidExportError, RootNodeNotFound
from .store import NodeStore
from .context import ConversionContext
from .converter import TanaGraphConverter

__all__ = [
    'GraphNode',
    'EdgeKind',
    'Edge',
    'TopLevelEntry',
    'Document',
    'ConversionSettings',
    'ConversionProgress',
    'ConversionResult',
    'ConversionError',
    'InvalidExportError',
    'RootNodeNotFound',
    'NodeStore',
    'ConversionContext',
    'TanaGraphConverter',
]
