"""
TMDB API utilities for Film Roulette.
Handles genre listing, discovery, and per-movie enrichment lookups.
"""

import logging
from typing import Dict, List, Optional

from .api_client import APIError, BaseAPIClient
from .config import ConfigurationError, get_tmdb_config

logger = logging.getLogger('film_roulette')

TMDB_API_BASE = "https://api.themoviedb.org/3"
TMDB_POSTER_BASE = "https://image.tmdb.org/t/p/w500"
TMDB_LOGO_BASE = "https://image.tmdb.org/t/p/original"

# v4 read access tokens are JWTs, which always start with this prefix
TMDB_BEARER_PREFIX = "eyJ"

# Streaming providers discovery is restricted to (Netflix, Prime Video,
# Disney+, Max, Apple TV+, Globoplay, Paramount+, ...)
DEFAULT_WATCH_PROVIDER_IDS = [8, 119, 9, 220, 350, 2, 3, 15, 192, 531, 7, 97, 384]

# Provider availability types returned to callers
PROVIDER_TYPES = ('flatrate', 'rent', 'buy')

MISSING_KEY_MESSAGE = "TMDB API key not configured. Use 'set-key' to configure it."


class TMDBAPIError(APIError):
    """Raised when a TMDB API request fails."""
    pass


def poster_url(poster_path: Optional[str]) -> str:
    """
    Build an absolute poster URL.

    Args:
        poster_path: TMDB relative poster path (e.g., '/abc.jpg')

    Returns:
        Absolute URL or empty string when the movie has no poster
    """
    if not poster_path:
        return ""
    return f"{TMDB_POSTER_BASE}{poster_path}"


def uses_bearer_auth(api_key: str) -> bool:
    """Check whether a credential is a v4 bearer token rather than a v3 key."""
    return bool(api_key) and api_key.startswith(TMDB_BEARER_PREFIX)


class TMDBClient(BaseAPIClient):
    """
    TMDB API client.

    Supports both credential styles: v4 read access tokens are sent as a
    bearer header, v3 API keys as the `api_key` query parameter.
    """

    api_name = "TMDB API"
    exception_class = TMDBAPIError
    request_timeout = 15

    def __init__(self, api_key: str, language: str = 'pt-BR', region: str = 'BR',
                 timeout: Optional[int] = None, watch_provider_ids: Optional[List[int]] = None):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB v3 API key or v4 read access token
            language: Response language (e.g., 'pt-BR')
            region: Watch-provider region code (e.g., 'BR')
            timeout: Per-request timeout in seconds
            watch_provider_ids: Provider IDs discovery is restricted to
        """
        super().__init__(TMDB_API_BASE, timeout)
        self.api_key = api_key
        self.language = language
        self.region = region
        self.watch_provider_ids = watch_provider_ids or DEFAULT_WATCH_PROVIDER_IDS

    @property
    def bearer(self) -> bool:
        return uses_bearer_auth(self.api_key)

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {"Content-Type": "application/json"}
        if self.bearer:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get(self, endpoint: str, params: Optional[Dict] = None,
             localized: bool = True) -> Dict:
        """
        GET an endpoint with auth and language parameters applied.

        Args:
            endpoint: API endpoint (without base URL)
            params: Extra query parameters
            localized: Whether to send the configured language

        Returns:
            Response JSON (empty dict for an empty body)
        """
        params = dict(params or {})
        if localized:
            params['language'] = self.language
        if not self.bearer:
            params['api_key'] = self.api_key
        return self._make_request("GET", endpoint, params=params) or {}

    def list_genres(self) -> List[Dict]:
        """
        Get the official movie genre list.

        Returns:
            List of {'id', 'name'} dicts

        Raises:
            TMDBAPIError: If the request fails or the body has no genre list
        """
        data = self._get("genre/movie/list")
        genres = data.get('genres')
        if not isinstance(genres, list):
            raise TMDBAPIError("Unexpected TMDB response while listing genres")
        return [{'id': g['id'], 'name': g['name']} for g in genres if 'id' in g and 'name' in g]

    def discover(self, include_genre_ids: List[int],
                 exclude_genre_ids: Optional[List[int]] = None) -> List[Dict]:
        """
        Run a filtered discovery query and return the first result page.

        Args:
            include_genre_ids: Genres every result must have
            exclude_genre_ids: Genres no result may have

        Returns:
            List of movie summary dicts (may be empty)
        """
        params = {
            'sort_by': 'popularity.desc',
            'include_video': 'true',
            'with_watch_providers': '|'.join(str(p) for p in self.watch_provider_ids),
        }
        if include_genre_ids:
            params['with_genres'] = ','.join(str(g) for g in include_genre_ids)
        if exclude_genre_ids:
            params['without_genres'] = ','.join(str(g) for g in exclude_genre_ids)

        data = self._get("discover/movie", params)
        return data.get('results') or []

    def movie_detail(self, movie_id: int) -> Dict:
        """Get full movie details (genres, runtime, etc.)."""
        return self._get(f"movie/{movie_id}")

    def movie_genre_names(self, movie_id: int) -> List[str]:
        """Get the genre names of a single movie."""
        detail = self.movie_detail(movie_id)
        return [g['name'] for g in detail.get('genres') or [] if g.get('name')]

    def movie_videos(self, movie_id: int) -> List[Dict]:
        """
        Get YouTube trailers for a movie.

        Args:
            movie_id: TMDB movie ID

        Returns:
            List of {'key', 'name', 'site', 'type'} dicts
        """
        data = self._get(f"movie/{movie_id}/videos")
        return [
            {
                'key': v.get('key', ''),
                'name': v.get('name', ''),
                'site': v.get('site', ''),
                'type': v.get('type', ''),
            }
            for v in data.get('results') or []
            if v.get('site') == 'YouTube' and v.get('type') == 'Trailer'
        ]

    def watch_providers(self, movie_id: int) -> Dict[str, List[Dict]]:
        """
        Get streaming providers for a movie in the configured region.

        Args:
            movie_id: TMDB movie ID

        Returns:
            Dict keyed by 'flatrate', 'rent', 'buy' with provider lists,
            or an empty dict if the movie is not available in the region
        """
        data = self._get(f"movie/{movie_id}/watch/providers", localized=False)
        regional = (data.get('results') or {}).get(self.region)
        if not regional:
            return {}

        providers = {}
        for provider_type in PROVIDER_TYPES:
            entries = []
            for p in regional.get(provider_type) or []:
                entry = {'provider_name': p.get('provider_name', '')}
                if p.get('logo_path'):
                    entry['logo_path'] = f"{TMDB_LOGO_BASE}{p['logo_path']}"
                entries.append(entry)
            providers[provider_type] = entries
        return providers

    def movie_reviews(self, movie_id: int) -> List[Dict]:
        """Get the first page of user reviews for a movie."""
        data = self._get(f"movie/{movie_id}/reviews", {'page': 1})
        return data.get('results') or []


def resolve_tmdb_api_key(config: Dict, store=None) -> str:
    """
    Resolve the TMDB credential.

    The key saved with 'set-key' wins; config/env is the fallback.

    Args:
        config: Root configuration dict
        store: Optional MovieStore holding the saved credential

    Returns:
        The credential string

    Raises:
        ConfigurationError: If no credential is available
    """
    api_key = store.get_api_key() if store is not None else None
    if not api_key:
        api_key = get_tmdb_config(config).get('api_key')
    if not api_key:
        raise ConfigurationError(MISSING_KEY_MESSAGE)
    return api_key


def create_tmdb_client(config: Dict, store=None) -> TMDBClient:
    """
    Create a TMDB client from config.

    Args:
        config: Root configuration dict
        store: Optional MovieStore holding the saved credential

    Returns:
        Configured TMDBClient

    Raises:
        ConfigurationError: If no credential is available
    """
    tmdb_config = get_tmdb_config(config)
    return TMDBClient(
        api_key=resolve_tmdb_api_key(config, store),
        language=tmdb_config['language'],
        region=tmdb_config['region'],
        timeout=tmdb_config['request_timeout'],
        watch_provider_ids=tmdb_config['watch_providers'],
    )
