"""Shared fixtures and export builders for the converter tests."""

import json
from pathlib import Path

import pytest

from tanagraph.context import ConversionContext
from tanagraph.models import ConversionSettings
from tanagraph.store import NodeStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_EXPORT = FIXTURES_DIR / "sample_tana_export.json"


def node(node_id, name=None, owner=None, children=(), doc_type=None, **props):
    """Build one raw export record."""
    record_props = {}
    if name is not None:
        record_props['name'] = name
    if owner is not None:
        record_props['_ownerId'] = owner
    if doc_type is not None:
        record_props['_docType'] = doc_type
    associations = props.pop('associations', None)
    for key, value in props.items():
        record_props[key] = value
    record = {'id': node_id, 'props': record_props, 'children': list(children)}
    if associations:
        record['associationMap'] = associations
    return record


def export(*docs) -> str:
    return json.dumps({'formatVersion': 1, 'docs': list(docs)})


def minimal_graph(*extra, workspace_children=()):
    """Root + workspace, plus any extra records."""
    return [
        node('R', 'Root node for file:test', children=['W']),
        node('W', 'Home', owner='R', children=workspace_children, doc_type='workspace'),
        *extra,
    ]


@pytest.fixture
def sample_text():
    return SAMPLE_EXPORT.read_text(encoding='utf-8')


@pytest.fixture
def settings():
    return ConversionSettings()


@pytest.fixture
def make_context(settings):
    """Factory: load records into a fresh context."""
    def _make(*docs):
        store = NodeStore().load(export(*docs))
        return ConversionContext(store, settings)
    return _make


@pytest.fixture
def sample_context(sample_text, settings):
    return ConversionContext(NodeStore().load(sample_text), settings)
