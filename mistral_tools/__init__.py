# =============================================================================
# mistral_tools/__init__.py
# =============================================================================
# The MCP translation layer.  mcp_server.py registers the Mistral chat tools
# with FastMCP and runs them over stdio; all request logic is imported from
# mistral_chat/.
# =============================================================================
