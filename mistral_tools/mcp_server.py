# =============================================================================
# mistral_tools/mcp_server.py: FastMCP Tool Server
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the Mistral chat tools over MCP.  The tools themselves (names,
#   descriptions, schemas, validation, the upstream call) live in
#   mistral_chat/; this file only plugs them into FastMCP and logs what
#   happens.
#
# HOW IT WORKS (the flow):
#   1. An MCP client (Claude Desktop, an agent, ...) lists the tools
#   2. FastMCP answers with one entry per ChatCompletionTool below, whose
#      inputSchema is the JSON Schema built in mistral_chat/schema.py
#   3. The client calls "mistral_chat_text" or "mistral_chat_image"
#   4. ChatCompletionTool.run() hands the raw arguments to the dispatcher
#   5. The dispatcher validates, calls Mistral, and returns the first text
#
# WHY NOT @mcp.tool()?
#   The decorator derives a schema from a Python signature.  These tools
#   advertise a hand-shaped request schema (model enum + tagged message
#   union) and receive the raw argument object, so each one is a Tool
#   subclass with its schema set explicitly.
#
# ERRORS:
#   Unknown tools, invalid arguments and upstream failures are raised as
#   ToolError.  FastMCP turns that into an error result for the client and
#   keeps serving.  The only fatal error is a missing API key at startup.
#
# RUNNING THIS SERVER:
#     python -m mistral_tools.mcp_server
#   or, once installed, the "mistral-mcp" console script.  MCP clients
#   launch it as a subprocess and talk to it over stdin/stdout.
# =============================================================================

import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool, ToolResult
from pydantic import Field

from mistral_chat.client import MistralClient
from mistral_chat.config import load_settings
from mistral_chat.dispatcher import ToolDispatcher, ToolMetadata
from mistral_chat.errors import DispatchError, StartupConfigurationError

SERVER_NAME = "Mistral MCP Server"
SERVER_VERSION = "0.1.0"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR.  STDOUT is the MCP transport, and anything else
# written there corrupts the JSON-RPC stream.
#
#   CYAN   → incoming tool calls
#   YELLOW → status / failures
#   GREEN  → responses
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, arguments: Any) -> None:
    """Log an incoming tool call with its model and message count in CYAN."""
    if isinstance(arguments, dict):
        messages = arguments.get("messages")
        count = len(messages) if isinstance(messages, list) else "?"
        summary = f"model={arguments.get('model')!r}, messages={count}"
    else:
        summary = f"arguments={arguments!r}"
    logging.info(f"{_CYAN}{tool_name} called with: {summary}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# The tool wrapper
# =============================================================================
class ChatCompletionTool(Tool):
    """One advertised Mistral tool, backed by the shared dispatcher."""

    dispatcher: Any = Field(default=None, exclude=True)

    @classmethod
    def from_metadata(
        cls, metadata: ToolMetadata, dispatcher: ToolDispatcher
    ) -> "ChatCompletionTool":
        return cls(
            name=metadata.name,
            description=metadata.description,
            parameters=metadata.input_schema,
            dispatcher=dispatcher,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        _log_request(self.name, arguments)
        try:
            result = await self.dispatcher.call_tool(self.name, arguments)
        except DispatchError as e:
            _log_status(f"{type(e).__name__}: {e}")
            raise ToolError(str(e)) from e

        _log_response(self.name, result)
        # The dispatcher always returns exactly one text item.
        return ToolResult(content=result["content"][0]["text"])


def build_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Create the FastMCP server and register every advertised tool."""
    mcp = FastMCP(SERVER_NAME, version=SERVER_VERSION)
    for metadata in dispatcher.list_tools():
        mcp.add_tool(ChatCompletionTool.from_metadata(metadata, dispatcher))
    return mcp


# =============================================================================
# Server entry point
# =============================================================================
# Settings are loaded before anything is served.  A missing API key prints
# a diagnostic to stderr and exits with status 1.
# =============================================================================
def main() -> None:
    try:
        settings = load_settings()
    except StartupConfigurationError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    client = MistralClient(api_key=settings.api_key, base_url=settings.base_url)
    mcp = build_server(ToolDispatcher(client))
    _log_status(f"{SERVER_NAME} {SERVER_VERSION} starting on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
