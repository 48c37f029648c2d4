"""Data classes for graph nodes, configuration and results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class GraphNode:
    """One record of the export's flat ``docs`` list."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    doc_type: Optional[str] = None  # 'journal', 'tuple', 'workspace', 'url', ...
    owner_id: Optional[str] = None
    meta_node_id: Optional[str] = None
    flags: int = 0
    done: bool = False
    children: Tuple[str, ...] = ()
    association_map: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, doc: dict) -> 'GraphNode':
        """Build a node from a raw export record."""
        props = doc.get('props') or {}
        associations = doc.get('associationMap') or {}
        return cls(
            id=doc['id'],
            name=props.get('name'),
            description=props.get('description'),
            doc_type=props.get('_docType'),
            owner_id=props.get('_ownerId'),
            meta_node_id=props.get('_metaNodeId'),
            flags=props.get('_flags') or 0,
            done=bool(props.get('_done')),
            children=tuple(doc.get('children') or ()),
            association_map={str(k): v for k, v in associations.items() if isinstance(v, str)},
        )

    def owns(self, child: 'GraphNode') -> bool:
        return child.owner_id == self.id


class EdgeKind(Enum):
    """How a node relates to a node it points at."""
    OWNED = 'owned'            # listed as a child and owned by the listing node
    REFERENCED = 'referenced'  # listed as a child but owned elsewhere
    ASSOCIATED = 'associated'  # used through associationMap, never listed


@dataclass(frozen=True)
class Edge:
    kind: EdgeKind
    parent: GraphNode
    child: GraphNode


@dataclass(frozen=True)
class TopLevelEntry:
    """A node chosen to become its own document."""
    node: GraphNode
    title: str


@dataclass(frozen=True)
class Document:
    """One rendered output file."""
    filename: str
    text: str


@dataclass
class ConversionSettings:
    """Constants of the export format; defaults match Tana JSON exports."""
    root_name_prefix: str = 'Root node for'
    system_id_prefix: str = 'SYS'
    system_child_prefix: str = 'SYS_'
    exempt_doc_types: Tuple[str, ...] = ('workspace',)

    # Well-known subtrees addressed as <root id><suffix>
    special_suffixes: Tuple[str, ...] = (
        '_TRASH', '_SCHEMA', '_SIDEBAR_AREAS', '_USERS',
        '_SEARCHES', '_MOVETO', '_WORKSPACE', '_QUICK_ADD',
    )
    library_suffix: str = '_STASH'

    # Meta node property ids
    tag_property_id: str = 'SYS_A13'
    checkbox_property_id: str = 'SYS_A55'
    checkbox_off_value_id: str = 'SYS_V04'

    heading_flag: int = 2
    max_reported_orphans: int = 50
    file_extension: str = '.md'


@dataclass
class ConversionProgress:
    """Progress update sent to the caller."""
    phase: str  # e.g., "Loading", "Classifying", "Rendering"
    current: int = 0
    total: int = 0
    message: str = ""


@dataclass
class ConversionResult:
    """Final result of conversion."""
    success: bool
    documents: List[Document] = field(default_factory=list)
    notices: List[str] = field(default_factory=list)
    converted_count: int = 0
    orphans: List[str] = field(default_factory=list)  # every unconverted id, not capped
    error_message: str = ""

    @property
    def fatal_error(self) -> Optional[str]:
        return None if self.success else self.error_message
