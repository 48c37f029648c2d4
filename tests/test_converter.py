"""Integration tests for the Tana graph converter."""

import json

import pytest

from tanagraph.converter import TanaGraphConverter
from tanagraph.models import ConversionProgress, ConversionResult, ConversionSettings

from conftest import export, minimal_graph, node


@pytest.fixture
def converter():
    return TanaGraphConverter()


@pytest.fixture
def sample_result(converter, sample_text):
    return converter.run(sample_text)


def documents_by_name(result: ConversionResult) -> dict:
    return {d.filename: d.text for d in result.documents}


class TestConverterInitialization:
    """Tests for converter initialization."""

    def test_default_settings(self):
        conv = TanaGraphConverter()
        assert conv.settings == ConversionSettings()
        assert conv.progress_callback is None

    def test_custom_settings(self):
        settings = ConversionSettings(file_extension='.markdown')
        conv = TanaGraphConverter(settings)
        result = conv.run(export(*minimal_graph()))
        assert [d.filename for d in result.documents] == ['Home.markdown']


class TestSampleExport:
    """End-to-end conversion of the sample fixture."""

    def test_successful_conversion(self, sample_result):
        assert sample_result.success is True
        assert sample_result.error_message == ""
        assert sample_result.fatal_error is None

    def test_documents_in_order(self, sample_result):
        assert [d.filename for d in sample_result.documents] == [
            'My Workspace.md',
            'Project Alpha.md',
            '2024-01-15 - Monday.md',
            '2024-01-16 - Tuesday.md',
        ]

    def test_workspace_document(self, sample_result):
        text = documents_by_name(sample_result)['My Workspace.md']
        assert text == '\n'.join([
            '- First **note**',
            '  - Nested with [[Project Alpha]]',
            '  - [[Project Alpha#^lib-item-child]]',
        ])

    def test_library_document(self, sample_result):
        text = documents_by_name(sample_result)['Project Alpha.md']
        assert text == '\n'.join([
            '---',
            'Status: Active',
            '---',
            '#project',
            'Main project',
            '- Shared idea ^lib-item-child',
            '- ### Milestones',
        ])

    def test_daily_notes(self, sample_result):
        documents = documents_by_name(sample_result)
        assert documents['2024-01-15 - Monday.md'] == '- [x] Complete the migration script #task'
        assert documents['2024-01-16 - Tuesday.md'] == '- https://example.com/page'

    def test_containers_do_not_become_documents(self, sample_result):
        names = {d.filename for d in sample_result.documents}
        for container in ('Daily notes.md', '2024.md', 'Week 3.md', 'Library.md', 'Trash.md'):
            assert container not in names

    def test_notices(self, sample_result):
        assert sample_result.notices == [
            'Special node _SIDEBAR_AREAS not found',
            'Special node _USERS not found',
            'Special node _SEARCHES not found',
            'Special node _MOVETO not found',
            'Special node _WORKSPACE not found',
            'Special node _QUICK_ADD not found',
            'Node with id missing_node (parent 2024-01-16 - Tuesday) not found',
            'Converted 30 nodes',
            'Found unconverted node: root > Library [ROOT_STASH] > Project Alpha [lib_item] > Forgotten [orphan_node]',
        ]

    def test_every_node_accounted_for(self, sample_text):
        """Each input id is converted, an orphan, or system-exempt."""
        conv = TanaGraphConverter()
        result = conv.run(sample_text)
        ids = [d['id'] for d in json.loads(sample_text)['docs']]
        exempt = [i for i in ids if i.startswith('SYS')]

        assert result.orphans == ['orphan_node']
        assert result.converted_count + len(result.orphans) + len(exempt) == len(ids)

    def test_idempotent(self, sample_text):
        """Two runs over the same input give identical output."""
        first = TanaGraphConverter().run(sample_text)
        second = TanaGraphConverter().run(sample_text)
        assert first.documents == second.documents
        assert first.notices == second.notices

    def test_same_converter_can_run_twice(self, converter, sample_text):
        first = converter.run(sample_text)
        second = converter.run(sample_text)
        assert first == second


class TestScenarios:
    """Small graphs exercising single behaviours end to end."""

    def test_single_child(self, converter):
        result = converter.run(export(*minimal_graph(node('c', 'Hello <b>world</b>', owner='W'),
                                                     workspace_children=['c'])))
        assert result.success is True
        assert [(d.filename, d.text) for d in result.documents] == [('Home.md', '- Hello **world**')]
        assert result.orphans == []

    def test_shared_child_not_duplicated(self, converter):
        """A child listed under a non-owner is linked there, not inlined."""
        result = converter.run(export(
            node('R', 'Root node for file:test', children=['W', 'R_STASH']),
            node('W', 'Home', owner='R', doc_type='workspace'),
            node('R_STASH', 'Library', owner='R', children=['A', 'B']),
            node('A', 'Doc A', owner='R_STASH', children=['C']),
            node('B', 'Doc B', owner='R_STASH', children=['C']),
            node('C', 'Shared thought', owner='A'),
        ))
        documents = documents_by_name(result)
        assert documents['Doc A.md'] == '- Shared thought ^C'
        assert documents['Doc B.md'] == '- [[Doc A#^C]]'
        all_text = '\n'.join(documents.values())
        assert all_text.count('Shared thought') == 1

    def test_reference_to_top_level_node(self, converter):
        result = converter.run(export(
            node('R', 'Root node for file:test', children=['W', 'R_STASH']),
            node('W', 'Home', owner='R', doc_type='workspace', children=['A']),
            node('R_STASH', 'Library', owner='R', children=['A']),
            node('A', 'Doc A', owner='R_STASH'),
        ))
        assert documents_by_name(result)['Home.md'] == '- [[Doc A]]'

    def test_tagged_top_level_node(self, converter):
        result = converter.run(export(
            node('R', 'Root node for file:test', children=['W', 'R_STASH']),
            node('W', 'Home', owner='R', doc_type='workspace', children=['n']),
            node('n', 'Inline item', owner='W', _metaNodeId='nm'),
            node('nm', owner='n', children=['nm_t']),
            node('nm_t', owner='nm', doc_type='tuple', children=['SYS_A13', 'tp']),
            node('tp', 'project', doc_type='tagDef', owner='R_SCHEMA'),
            node('R_STASH', 'Library', owner='R', children=['A']),
            node('A', 'Doc A', owner='R_STASH', description='Desc', _metaNodeId='am'),
            node('am', owner='A', children=['am_t']),
            node('am_t', owner='am', doc_type='tuple', children=['SYS_A13', 'tp']),
        ))
        documents = documents_by_name(result)
        assert documents['Home.md'] == '- Inline item #project'
        assert documents['Doc A.md'] == '#project\nDesc'

    def test_missing_root_is_fatal(self, converter):
        result = converter.run(export(node('W', 'Home', doc_type='workspace')))
        assert result.success is False
        assert result.error_message == 'Root node not found'
        assert result.fatal_error == 'Root node not found'
        assert result.documents == []

    def test_invalid_json_is_fatal(self, converter):
        result = converter.run('{ invalid json }')
        assert result.success is False
        assert 'Invalid JSON' in result.error_message
        assert result.documents == []

    def test_journal_days(self, converter):
        """One year, one week, two days: two extra documents."""
        result = converter.run(export(
            *minimal_graph(workspace_children=['J']),
            node('J', 'Journal', owner='W', doc_type='journal', children=['Y']),
            node('Y', '2024', owner='J', children=['K']),
            node('K', 'Week 1', owner='Y', children=['D1', 'D2']),
            node('D1', '2024-01-01', owner='K', children=['e1']),
            node('e1', 'Happy new year', owner='D1'),
            node('D2', '2024-01-02', owner='K'),
        ))
        assert [d.filename for d in result.documents] == ['Home.md', '2024-01-01.md', '2024-01-02.md']
        assert documents_by_name(result)['2024-01-01.md'] == '- Happy new year'
        assert result.orphans == []

    def test_multiple_sources_merged(self, converter):
        """References across files resolve through the shared store."""
        first = export(*minimal_graph(node('c', 'See', owner='W', children=['x']),
                                      workspace_children=['c']))
        second = export(node('x', 'Elsewhere', owner='c'))
        result = converter.run(first, second)
        assert documents_by_name(result)['Home.md'] == '- See\n  - Elsewhere'

    def test_unresolved_link_is_visible(self, converter):
        result = converter.run(export(*minimal_graph(
            node('c', 'Ref to <span data-inlineref-node="lost"></span>', owner='W'),
            node('lost', 'Lost', owner='nowhere'),
            workspace_children=['c'],
        )))
        assert documents_by_name(result)['Home.md'] == '- Ref to [[#]]'
        assert 'Unresolved link to node lost' in result.notices
        assert result.orphans == ['lost']


class TestProgressReporting:
    """Tests for progress callback functionality."""

    def test_progress_callback_called(self, sample_text):
        progress_updates = []

        def capture_progress(progress: ConversionProgress):
            progress_updates.append(progress)

        TanaGraphConverter(progress_callback=capture_progress).run(sample_text)

        phases = [p.phase for p in progress_updates]
        for phase in ('Loading', 'Indexing', 'Classifying', 'Rendering', 'Diagnostics', 'Complete'):
            assert phase in phases
        assert phases[-1] == 'Complete'

    def test_progress_on_failure(self):
        progress_updates = []
        TanaGraphConverter(progress_callback=progress_updates.append).run(export(node('a')))
        assert 'Complete' not in {p.phase for p in progress_updates}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
