#!/usr/bin/python3
# -*- coding: utf-8 -*-
"""
MCP Server for JS Inliner

This server exposes the inlining stage as MCP tools.
Run this script to start the MCP server.

Usage:
    python mcp_server.py
"""
import asyncio
import json
import sys
from typing import Any, Sequence
from pathlib import Path

# Add current directory to path
sys.path.insert(0, str(Path(__file__).parent))

try:
    from mcp.server import Server
    from mcp.server.stdio import stdio_server
    from mcp.types import Tool, TextContent
except ImportError:
    print("Error: mcp package not installed. Install it with:")
    print("  pip install mcp")
    sys.exit(1)

# Import core modules
from core.exceptions import JsInlineError
from core.logging_config import get_logger

# Setup logger
logger = get_logger(__name__)

# Import MCP tools
from js_inliner import inlineScripts, listHtmlFiles

# Create MCP server instance
server = Server("js-inliner")


# ============================================================================
# Tool Registration
# ============================================================================

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available MCP tools"""
    return [
        Tool(
            name="inlineScripts",
            description="Inline local <script src> files into the HTML files of a build output directory.",
            inputSchema={
                "type": "object",
                "properties": {
                    "outputDir": {
                        "type": "string",
                        "description": "Build output directory (default: dist in the working directory)"
                    },
                    "params": {
                        "type": "string",
                        "description": "Parameter string (e.g. 'minify=true;inlineAll=true;sourceDirs=src,public')",
                        "default": ""
                    },
                    "configFile": {
                        "type": "string",
                        "description": "Path to a config.yaml with a jsInline section"
                    }
                }
            }
        ),
        Tool(
            name="listHtmlFiles",
            description="List the HTML files found under a build output directory.",
            inputSchema={
                "type": "object",
                "required": ["outputDir"],
                "properties": {
                    "outputDir": {
                        "type": "string",
                        "description": "Build output directory"
                    }
                }
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> Sequence[TextContent]:
    """Execute MCP tool"""
    try:
        if name == "inlineScripts":
            result = inlineScripts(
                arguments.get("outputDir"),
                arguments.get("params", ""),
                arguments.get("configFile")
            )
        elif name == "listHtmlFiles":
            result = listHtmlFiles(arguments["outputDir"])
        else:
            raise ValueError(f"Unknown tool: {name}")

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, ensure_ascii=False)
        )]

    except JsInlineError as e:
        error_msg = f"Error executing {name}: {str(e)}"
        logger.error(error_msg)
        return [TextContent(
            type="text",
            text=json.dumps({
                "error": error_msg,
                "type": type(e).__name__
            }, indent=2, ensure_ascii=False)
        )]
    except Exception as e:
        error_msg = f"Unexpected error executing {name}: {str(e)}"
        import traceback
        error_details = traceback.format_exc()
        logger.error(f"{error_msg}\n{error_details}")
        return [TextContent(
            type="text",
            text=json.dumps({
                "error": error_msg,
                "details": error_details
            }, indent=2, ensure_ascii=False)
        )]


# ============================================================================
# Main Entry Point
# ============================================================================

async def main():
    """Main entry point for MCP server"""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options()
        )


if __name__ == "__main__":
    asyncio.run(main())
