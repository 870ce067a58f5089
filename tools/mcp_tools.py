"""MCP tool definitions for the quickfind server."""

from typing import List
from mcp.types import Tool


def get_tools() -> List[Tool]:
    """Return all available MCP tools."""
    return [
        Tool(
            name="search",
            description="""Search a directory or a single file live, without any index.

Two modes:
• text: the query is a regular expression matched line by line against file contents. An invalid expression is searched for as literal text instead. Each result has file, line, column and the trimmed line text.
• name: the query is a fuzzy file-name query ranked against every file's name and relative path (e.g. "ErrInv" finds "ErrorInvalidInput.ts"). Each result carries a score and the matched character indices.

Results are paginated: the first page holds 50 results, use load_more for the next 25. When the result cap is reached, "truncated" is true and "count_label" reads like "1000+".

Pass the returned session_id back to run further queries against the same root; name-mode queries on an existing session reuse its file list instead of walking the tree again. Searching without a session_id opens a new session; at most 32 sessions stay open and the least recently used one is closed when another is opened, so close sessions you no longer need.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Regular expression (text mode) or fuzzy file-name query (name mode)"
                    },
                    "root": {
                        "type": "string",
                        "description": "Directory or file to search. Required unless session_id is given."
                    },
                    "mode": {
                        "type": "string",
                        "enum": ["text", "name"],
                        "description": "Search file contents or rank file names",
                        "default": "text"
                    },
                    "session_id": {
                        "type": "string",
                        "description": "Existing session to reuse (from a previous search)"
                    },
                    "case_sensitive": {
                        "type": "boolean",
                        "description": "Match case exactly (text mode)"
                    },
                    "whole_word": {
                        "type": "boolean",
                        "description": "Only match whole words (text mode)"
                    },
                    "max_results": {
                        "type": "integer",
                        "description": "Result cap for this query (positive)",
                        "minimum": 1
                    },
                    "max_file_size": {
                        "type": ["integer", "string"],
                        "description": "Skip files larger than this, in bytes or with a unit such as '2MB'"
                    },
                    "context_size": {
                        "type": "integer",
                        "description": "Lines of context per side used by load_context",
                        "minimum": 0
                    }
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="load_more",
            description="Show the next page of results of a search session without searching again.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session_id": {
                        "type": "string",
                        "description": "Session returned by search"
                    }
                },
                "required": ["session_id"]
            }
        ),
        Tool(
            name="load_context",
            description="Load the lines surrounding one result. For text results this is the match line with context_size lines on each side; for name results it is a preview of the start of the file. Loaded context is cached for the lifetime of the result set.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session_id": {
                        "type": "string",
                        "description": "Session returned by search"
                    },
                    "match_id": {
                        "type": "integer",
                        "description": "The match_id of a result in the session's current results"
                    },
                    "context_size": {
                        "type": "integer",
                        "description": "Lines of context per side (defaults to the query's setting)"
                    }
                },
                "required": ["session_id", "match_id"]
            }
        ),
        Tool(
            name="close_session",
            description="Close a search session and release its cached results and file list.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session_id": {
                        "type": "string",
                        "description": "Session to close"
                    }
                },
                "required": ["session_id"]
            }
        ),
        Tool(
            name="get_settings",
            description="Show the effective search settings: defaults, overridden by .quickfind/settings.json under the root, overridden by QUICKFIND_* environment variables.",
            inputSchema={
                "type": "object",
                "properties": {
                    "root": {
                        "type": "string",
                        "description": "Directory whose settings file should be read (defaults to the server's working directory)"
                    }
                },
                "required": []
            }
        )
    ]
