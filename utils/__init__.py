"""
Film Roulette Utilities Package.

This package contains modular utility functions organized by responsibility.
Public names are re-exported here for convenience; the CLI lives in
utils.cli and is imported from there.
"""

# Config utilities
from .config import (
    __version__,
    DEFAULT_CONFIG_PATH,
    ConfigurationError,
    get_config_section,
    get_tmdb_config,
    get_ai_config,
    get_storage_config,
    get_current_user,
    load_config,
)

# Display utilities
from .display import (
    RED,
    GREEN,
    YELLOW,
    CYAN,
    RESET,
    ColoredFormatter,
    setup_logging,
    print_status,
    log_warning,
    log_error,
)

# HTTP clients
from .api_client import APIError, BaseAPIClient
from .tmdb import (
    TMDBAPIError,
    TMDBClient,
    create_tmdb_client,
    poster_url,
    resolve_tmdb_api_key,
)
from .ai import AIServiceError, AIClient, create_ai_client

# Storage
from .storage import (
    StorageError,
    DuplicateMovieError,
    RowNotFoundError,
    MovieNotFoundError,
    TodoNotFoundError,
    MovieStore,
    create_movie_store,
)

# Genres
from .genres import (
    GENRE_NAME_TO_ID,
    DEFAULT_GENRE_ID,
    POPULAR_GENRES,
    resolve_genre_id,
    parse_stored_genres,
)

# Helpers
from .helpers import get_project_root, round_half_up, format_timestamp

__all__ = [
    # Config
    '__version__',
    'DEFAULT_CONFIG_PATH',
    'ConfigurationError',
    'get_config_section',
    'get_tmdb_config',
    'get_ai_config',
    'get_storage_config',
    'get_current_user',
    'load_config',
    # Display
    'RED',
    'GREEN',
    'YELLOW',
    'CYAN',
    'RESET',
    'ColoredFormatter',
    'setup_logging',
    'print_status',
    'log_warning',
    'log_error',
    # Clients
    'APIError',
    'BaseAPIClient',
    'TMDBAPIError',
    'TMDBClient',
    'create_tmdb_client',
    'poster_url',
    'resolve_tmdb_api_key',
    'AIServiceError',
    'AIClient',
    'create_ai_client',
    # Storage
    'StorageError',
    'DuplicateMovieError',
    'RowNotFoundError',
    'MovieNotFoundError',
    'TodoNotFoundError',
    'MovieStore',
    'create_movie_store',
    # Genres
    'GENRE_NAME_TO_ID',
    'DEFAULT_GENRE_ID',
    'POPULAR_GENRES',
    'resolve_genre_id',
    'parse_stored_genres',
    # Helpers
    'get_project_root',
    'round_half_up',
    'format_timestamp',
]
