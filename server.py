#!/usr/bin/env python3
"""quickfind MCP Server - live text search and fuzzy file-name search.

Session Pattern:
The search tool opens a session for a root and returns its session_id. Later
queries, load_more, load_context and close_session all address that session
explicitly; the server keeps no notion of an "active" search.
"""

import os
import json
import logging
from typing import List, Dict, Any
from mcp.server import Server
from mcp.types import Tool, TextContent
from mcp.server.stdio import stdio_server
from mcp.server.models import InitializationOptions
from mcp.server.lowlevel import NotificationOptions

from tools.mcp_tools import get_tools
from config.config_service import ConfigurationService
from search.errors import SearchError
from search.search_service import SearchService

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

# Use client root directory if available, otherwise current working directory
client_root = os.environ.get('MCP_CLIENT_ROOT', os.getcwd())

# Initialize server
server = Server("quickfind")
config_service = ConfigurationService(client_root)
search_service = SearchService(config_service=config_service)

OPTION_ARGUMENTS = ("case_sensitive", "whole_word", "max_results", "max_file_size", "context_size")


def _json_response(payload: Any) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


@server.list_tools()
async def list_tools() -> List[Tool]:
    """List available tools."""
    return get_tools()


@server.call_tool()
async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "search":
            query = arguments.get("query", "")
            root = arguments.get("root")
            mode = arguments.get("mode", "text")
            session_id = arguments.get("session_id")
            options = {key: arguments[key] for key in OPTION_ARGUMENTS if key in arguments}
            if root and not session_id:
                root = os.path.join(client_root, root)
            snapshot = await search_service.search(root, query, mode, options, session_id=session_id)
            if snapshot is None:
                return _json_response({
                    "superseded": True,
                    "message": "A newer query on this session replaced this one"
                })
            return _json_response(snapshot.to_dict())

        elif name == "load_more":
            session_id = arguments.get("session_id", "")
            snapshot = search_service.load_more(session_id)
            return _json_response(snapshot.to_dict())

        elif name == "load_context":
            session_id = arguments.get("session_id", "")
            match_id = int(arguments.get("match_id", -1))
            context_size = arguments.get("context_size")
            lines = await search_service.load_context(session_id, match_id, context_size)
            return _json_response({
                "session_id": session_id,
                "match_id": match_id,
                "context": lines
            })

        elif name == "close_session":
            session_id = arguments.get("session_id", "")
            closed = search_service.close_session(session_id)
            return _json_response({"success": closed, "session_id": session_id})

        elif name == "get_settings":
            root = arguments.get("root")
            if root:
                settings = ConfigurationService(os.path.join(client_root, root)).get_settings()
            else:
                settings = search_service.get_settings()
            return _json_response(settings.to_dict())

        else:
            return _json_response({"error": f"Unknown tool: {name}"})

    except SearchError as e:
        return _json_response({"error": str(e)})
    except ValueError as e:
        logging.warning(f"Invalid arguments for {name}: {e}")
        return _json_response({"error": str(e)})
    except Exception as e:
        logging.error(f"Tool {name} failed: {e}", exc_info=True)
        return _json_response({"error": f"Internal error: {e}"})


def main_sync():
    """Main entry point for stdio execution."""
    import asyncio
    asyncio.run(main_async())


async def main_async():
    """Main entry point for async stdio execution."""
    # Fail at start-up, not on the first search, when settings are invalid
    settings = config_service.get_settings()
    logging.info(f"Starting stdio server (max_results={settings.max_results}, root={client_root})")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name="quickfind",
                server_version="0.1.0",
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={}
                )
            )
        )


if __name__ == "__main__":
    main_sync()
