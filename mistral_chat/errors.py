# =============================================================================
# mistral_chat/errors.py: Error kinds
# =============================================================================
#
# Per-request failures all derive from DispatchError so the MCP layer can
# turn them into tool errors with a single except clause.  The startup
# error stands apart: it is raised before any request is served and ends
# the process.
# =============================================================================

from pydantic import ValidationError


class StartupConfigurationError(Exception):
    """A required setting (the API key) is missing."""


class DispatchError(Exception):
    """Base class for failures surfaced to the caller of a tool."""


class UnknownToolError(DispatchError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name!r}")


class RequestValidationError(DispatchError):
    """Tool arguments did not match the request schema of the named tool.

    The message enumerates every invalid field path together with the
    constraint it broke, e.g.::

        Invalid arguments for mistral_chat_text: model: Input should be
        'mistral-large-latest' or 'mistral-small-latest'
    """

    def __init__(self, tool_name: str, error: ValidationError):
        self.tool_name = tool_name
        self.errors = error.errors(include_url=False)
        details = "; ".join(
            f"{_format_loc(e['loc'])}: {e['msg']}" for e in self.errors
        )
        super().__init__(f"Invalid arguments for {tool_name}: {details}")


class UpstreamError(DispatchError):
    """The chat-completion call failed or returned something unreadable."""


# pydantic error locations include union bookkeeping: the role tag after a
# message index, "str" / "list[...]" branch labels, model class names, and
# the chunk type tag after an index in a tagged chunk list.  Callers only
# see the field path.
_ROLE_TAGS = {"system", "user", "assistant"}
_CHUNK_TAGS = {"text", "image_url"}


def _format_loc(loc: tuple) -> str:
    parts: list[str] = []
    tags = None
    for part in loc:
        if isinstance(part, int):
            parts.append(str(part))
            continue
        if tags and part in tags and parts and parts[-1].isdigit():
            tags = None
            continue
        if _is_branch_label(part):
            if "tagged-union[" in part:
                tags = _CHUNK_TAGS
            continue
        parts.append(part)
        tags = _ROLE_TAGS if part == "messages" else None
    return ".".join(parts) or "<root>"


def _is_branch_label(part: str) -> bool:
    return part == "str" or "[" in part or part[:1].isupper()
