# =============================================================================
# mistral_chat/config.py: Startup configuration
# =============================================================================
#
# Settings come from the process environment, optionally seeded from a .env
# file at the project root.  Values already present in the environment win
# over the .env file.
#
#   MISTRAL_API_KEY   (required)  credential for the Mistral API
#   MISTRAL_BASE_URL  (optional)  OpenAI-compatible endpoint to call
#
# Settings are loaded once, in the server's main(), and handed to the
# upstream client explicitly.  Nothing else in the package reads the
# environment.
# =============================================================================

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

from mistral_chat.errors import StartupConfigurationError

DEFAULT_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
DEFAULT_BASE_URL = "https://api.mistral.ai/v1"


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL


def load_settings(env_file: Union[str, Path] = DEFAULT_ENV_FILE) -> Settings:
    """Read settings from the environment (and ``env_file`` if it exists).

    Raises:
        StartupConfigurationError: if MISTRAL_API_KEY is missing or empty.
    """
    load_dotenv(env_file)

    api_key = os.getenv("MISTRAL_API_KEY")
    if not api_key:
        raise StartupConfigurationError(
            "MISTRAL_API_KEY environment variable is required"
        )
    return Settings(
        api_key=api_key,
        base_url=os.getenv("MISTRAL_BASE_URL") or DEFAULT_BASE_URL,
    )
