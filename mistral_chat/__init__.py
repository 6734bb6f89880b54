# =============================================================================
# mistral_chat/__init__.py
# =============================================================================
# This package contains everything the Mistral tools need that is NOT
# protocol wiring: request validation, the upstream completion client,
# configuration loading, and the dispatcher that ties them together.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  The MCP layer lives in
#   mistral_tools/ and depends on this package, never the other way round.
#   Everything here can be exercised from a plain pytest run with a stub
#   upstream client and no network access.
# =============================================================================
