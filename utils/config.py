"""
Configuration utilities for Film Roulette.
Handles config loading, section access, and environment overrides.
"""

import os
import yaml
from typing import Dict, Optional

# Project version - single source of truth
__version__ = "1.0.0"

# Default config location, relative to the project root
DEFAULT_CONFIG_PATH = os.path.join('config', 'config.yml')

# TMDB defaults
DEFAULT_TMDB_LANGUAGE = 'pt-BR'
DEFAULT_TMDB_REGION = 'BR'
DEFAULT_TMDB_TIMEOUT = 15           # Seconds per TMDB request

# AI service defaults (OpenAI-compatible chat completions)
DEFAULT_AI_URL = 'https://api.openai.com/v1'
DEFAULT_AI_MODEL = 'gpt-4o-mini'
DEFAULT_AI_TIMEOUT = 60             # Completions are slow, allow a minute

# Storage defaults
DEFAULT_DATABASE_PATH = os.path.join('data', 'film_roulette.db')

# Environment variables take precedence over config values
ENV_OVERRIDES = [
    ('TMDB_API_KEY', 'tmdb', 'api_key'),
    ('AI_API_KEY', 'ai', 'api_key'),
    ('AI_API_URL', 'ai', 'url'),
    ('FILM_ROULETTE_DB', 'storage', 'database'),
]


class ConfigurationError(Exception):
    """Raised when a required setting or credential is missing."""
    pass


def get_config_section(config: Dict, key: str, default: Dict = None) -> Dict:
    """
    Get a config section case-insensitively.

    Args:
        config: The configuration dictionary
        key: The key to look for (will check lowercase and uppercase)
        default: Default value if key not found

    Returns:
        The config section or default value
    """
    if default is None:
        default = {}
    if not config:
        return default
    # Try lowercase first (preferred), then uppercase
    section = config.get(key.lower(), config.get(key.upper(), default))
    return section if section is not None else default


def get_tmdb_config(config: Dict) -> Dict:
    """
    Get TMDB configuration section with defaults applied.

    Args:
        config: The root configuration dictionary

    Returns:
        Dict with 'api_key', 'language', 'region', 'request_timeout'
        and 'watch_providers' keys
    """
    tmdb_config = get_config_section(config, 'tmdb')
    return {
        'api_key': tmdb_config.get('api_key'),
        'language': tmdb_config.get('language', DEFAULT_TMDB_LANGUAGE),
        'region': tmdb_config.get('region', DEFAULT_TMDB_REGION),
        'request_timeout': tmdb_config.get('request_timeout', DEFAULT_TMDB_TIMEOUT),
        'watch_providers': tmdb_config.get('watch_providers'),
    }


def get_ai_config(config: Dict) -> Dict:
    """
    Get AI service configuration section with defaults applied.

    Args:
        config: The root configuration dictionary

    Returns:
        Dict with 'url', 'api_key', 'model' and 'request_timeout' keys
    """
    ai_config = get_config_section(config, 'ai')
    return {
        'url': ai_config.get('url', DEFAULT_AI_URL),
        'api_key': ai_config.get('api_key'),
        'model': ai_config.get('model', DEFAULT_AI_MODEL),
        'request_timeout': ai_config.get('request_timeout', DEFAULT_AI_TIMEOUT),
    }


def get_storage_config(config: Dict) -> Dict:
    """Get storage configuration section with defaults applied."""
    storage_config = get_config_section(config, 'storage')
    return {
        'database': storage_config.get('database', DEFAULT_DATABASE_PATH),
    }


def get_current_user(config: Dict) -> Optional[Dict]:
    """
    Look up the optional current user from config.

    Args:
        config: The root configuration dictionary

    Returns:
        Dict with 'name' and 'email' or None when no user is configured
    """
    user = get_config_section(config, 'user')
    if not user or not user.get('name'):
        return None
    return {
        'name': user['name'],
        'email': user.get('email'),
    }


def _section_key(config: Dict, key: str) -> str:
    """Find the key a section is stored under, with the same precedence as get_config_section."""
    for candidate in (key.lower(), key.upper()):
        if candidate in config:
            return candidate
    return key.lower()


def apply_env_overrides(config: Dict) -> Dict:
    """
    Apply environment variable overrides to a config dict in place.

    Overrides land in the existing section whatever its case, so an
    uppercase TMDB: section keeps its other settings.

    Args:
        config: Parsed configuration dictionary

    Returns:
        The same dict, with overridden values
    """
    for env_var, section, key in ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value:
            section_key = _section_key(config, section)
            if not isinstance(config.get(section_key), dict):
                config[section_key] = {}
            config[section_key][key] = value
    return config


def load_config(config_path: str) -> dict:
    """
    Load YAML configuration and apply environment overrides.

    A missing file is not an error: every section has defaults, and
    credentials can still come from the environment or the row store.

    Environment variables take precedence over all config values:
        TMDB_API_KEY      -> tmdb.api_key
        AI_API_KEY        -> ai.api_key
        AI_API_URL        -> ai.url
        FILM_ROULETTE_DB  -> storage.database

    Args:
        config_path: Path to config.yml file

    Returns:
        Parsed config dictionary

    Raises:
        yaml.YAMLError: If the file exists but is not valid YAML
    """
    config = {}
    if os.path.exists(config_path):
        with open(config_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file) or {}

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    return apply_env_overrides(config)
