"""
API Client Management - Groq API with automatic fallback support
"""
import logging
import os

from groq import Groq

from config import ENV_API_KEY_PRIMARY, ENV_API_KEY_2, ENV_API_KEY_3, MAX_API_KEYS

logger = logging.getLogger(__name__)


def get_api_keys(extra_keys=None):
    """
    Get API keys from explicit settings and environment variables.
    Returns up to 5 API keys, explicit keys first.
    """
    keys = [key for key in (extra_keys or []) if key]

    env_keys = [
        os.getenv(ENV_API_KEY_PRIMARY),
        os.getenv(ENV_API_KEY_2),
        os.getenv(ENV_API_KEY_3)
    ]

    for key in env_keys:
        if key and key not in keys:
            keys.append(key)

    return keys[:MAX_API_KEYS]


def is_rate_limit_error(error):
    error_msg = str(error).lower()
    return "rate_limit" in error_msg or "429" in error_msg or "quota" in error_msg


def create_groq_client_with_fallback(api_keys, operation_func, *args, client_factory=Groq, **kwargs):
    """
    Create Groq client and execute operation with automatic key fallback on rate limits.

    Args:
        api_keys: List of API keys to try
        operation_func: Function to execute (must accept client as first argument)
        client_factory: Client constructor, Groq by default
        *args, **kwargs: Arguments to pass to operation_func

    Returns:
        Result from operation_func

    Raises:
        Last encountered error if all keys fail
    """
    if not api_keys:
        raise ValueError("No API keys provided")

    for idx, key in enumerate(api_keys):
        try:
            client = client_factory(api_key=key)
            return operation_func(client, *args, **kwargs)

        except Exception as e:
            if not is_rate_limit_error(e):
                raise
            if idx < len(api_keys) - 1:
                logger.warning("API key %d hit rate limit. Switching to fallback key %d...", idx + 1, idx + 2)
                continue
            logger.error("All API keys exhausted. Rate limit reached on all keys.")
            raise
