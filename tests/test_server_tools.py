"""Tests for the MCP tool definitions and tool dispatch."""

import asyncio
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

import server
from tools.mcp_tools import get_tools


def call(name, arguments):
    result = asyncio.run(server.call_tool(name, arguments))
    return json.loads(result[0].text)


class TestToolDefinitions(unittest.TestCase):
    """Test the advertised tool list."""

    def test_tool_names(self):
        """Test the advertised tool names."""
        names = [tool.name for tool in get_tools()]
        self.assertEqual(names, ['search', 'load_more', 'load_context', 'close_session', 'get_settings'])

    def test_search_schema(self):
        """Test the search tool input schema."""
        search = get_tools()[0]
        self.assertEqual(search.inputSchema['required'], ['query'])
        self.assertEqual(search.inputSchema['properties']['mode']['enum'], ['text', 'name'])

    def test_list_tools_handler(self):
        """Test the list_tools handler."""
        tools = asyncio.run(server.list_tools())
        self.assertEqual(len(tools), 5)


class TestToolDispatch(unittest.TestCase):
    """Test tool calls end to end against a temporary tree."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        with open(os.path.join(self.temp_dir, 'app.py'), 'w') as f:
            f.write("import os\n\ndef main():\n    return os.getcwd()\n")
        with open(os.path.join(self.temp_dir, 'README.md'), 'w') as f:
            f.write("# App\nRun main.\n")

    def tearDown(self):
        server.search_service.close_all()
        shutil.rmtree(self.temp_dir)

    def test_text_search_and_follow_ups(self):
        """Test a text search followed by load_more, load_context and close_session."""
        result = call('search', {'query': 'main', 'root': self.temp_dir})
        session_id = result['session_id']

        self.assertEqual(result['mode'], 'text')
        self.assertEqual(result['total'], 2)
        self.assertEqual(result['count_label'], '2')
        self.assertEqual(result['results'][0]['line'], 3)
        self.assertEqual(result['results'][0]['column'], 5)

        more = call('load_more', {'session_id': session_id})
        self.assertEqual(more['displayed'], 2)
        self.assertFalse(more['has_more'])

        context = call('load_context', {'session_id': session_id, 'match_id': 0, 'context_size': 1})
        self.assertEqual(context['context'], ['', 'def main():', '    return os.getcwd()'])

        closed = call('close_session', {'session_id': session_id})
        self.assertTrue(closed['success'])

    def test_name_search(self):
        """Test a name-mode search."""
        result = call('search', {'query': 'rdme', 'root': self.temp_dir, 'mode': 'name'})
        self.assertEqual(result['results'][0]['name'], 'README.md')
        self.assertGreater(result['results'][0]['score'], 0)

    def test_options_are_passed_through(self):
        """Test that option arguments reach the search."""
        result = call('search', {
            'query': 'MAIN',
            'root': self.temp_dir,
            'case_sensitive': True
        })
        self.assertEqual(result['total'], 0)

    def test_negative_max_results_is_reported(self):
        """Test that an invalid result cap is answered with an error."""
        result = call('search', {'query': 'main', 'root': self.temp_dir, 'max_results': -1})
        self.assertIn('max_results', result['error'])

    def test_search_reuses_session(self):
        """Test searching again on a returned session."""
        first = call('search', {'query': 'import', 'root': self.temp_dir})
        second = call('search', {'query': 'Run', 'session_id': first['session_id']})
        self.assertEqual(second['session_id'], first['session_id'])
        self.assertEqual(second['total'], 1)

    def test_superseded_search(self):
        """Test the answer for a superseded search."""
        with patch.object(server.search_service, 'search', return_value=None) as mock_search:
            result = call('search', {'query': 'x', 'root': self.temp_dir})
        mock_search.assert_called_once()
        self.assertTrue(result['superseded'])

    def test_unknown_session_is_reported(self):
        """Test that an unknown session is reported as an error."""
        result = call('load_more', {'session_id': 'missing'})
        self.assertIn('missing', result['error'])

    def test_unknown_match_is_reported(self):
        """Test that an unknown match is reported as an error."""
        session_id = call('search', {'query': 'main', 'root': self.temp_dir})['session_id']
        result = call('load_context', {'session_id': session_id, 'match_id': 99})
        self.assertIn('error', result)

    def test_search_without_root_or_session(self):
        """Test a search with neither root nor session."""
        result = call('search', {'query': 'main'})
        self.assertIn('error', result)

    def test_unknown_tool(self):
        """Test calling an unknown tool."""
        result = call('frobnicate', {})
        self.assertEqual(result['error'], 'Unknown tool: frobnicate')

    def test_get_settings_for_root(self):
        """Test reading settings for a root."""
        config_dir = os.path.join(self.temp_dir, '.quickfind')
        os.makedirs(config_dir)
        with open(os.path.join(config_dir, 'settings.json'), 'w') as f:
            json.dump({'context_size': 4}, f)

        result = call('get_settings', {'root': self.temp_dir})
        self.assertEqual(result['context_size'], 4)
        self.assertEqual(result['max_results'], 1000)


if __name__ == '__main__':
    unittest.main()
