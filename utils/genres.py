"""
Genre lookup utilities for Film Roulette.
Maps stored genre names to TMDB genre IDs and decodes stored genre lists.
"""

import json
import logging
from types import MappingProxyType
from typing import List, Optional

logger = logging.getLogger('film_roulette')

# TMDB movie genre IDs keyed by their pt-BR names. Stored genre lists
# carry names only, so this is how suggestions get usable IDs back.
GENRE_NAME_TO_ID = MappingProxyType({
    'Ação': 28,
    'Aventura': 12,
    'Animação': 16,
    'Comédia': 35,
    'Crime': 80,
    'Documentário': 99,
    'Drama': 18,
    'Família': 10751,
    'Fantasia': 14,
    'História': 36,
    'Terror': 27,
    'Música': 10402,
    'Mistério': 9648,
    'Romance': 10749,
    'Ficção científica': 878,
    'Cinema TV': 10770,
    'Thriller': 53,
    'Guerra': 10752,
    'Faroeste': 37,
})

# ID used for names missing from the table (Drama)
DEFAULT_GENRE_ID = 18

# Suggested when there is no watch history to learn from
POPULAR_GENRES = (
    {'id': 28, 'name': 'Ação'},
    {'id': 35, 'name': 'Comédia'},
    {'id': 18, 'name': 'Drama'},
)


def resolve_genre_id(name: str) -> int:
    """
    Look up the TMDB ID for a genre name (exact match).

    Args:
        name: Genre name as stored in watch history

    Returns:
        Genre ID, or DEFAULT_GENRE_ID when the name is not in the table
    """
    return GENRE_NAME_TO_ID.get(name, DEFAULT_GENRE_ID)


def parse_stored_genres(raw: Optional[str]) -> List[str]:
    """
    Decode a stored genre list.

    Never raises: empty, malformed or non-list values decode to [].

    Args:
        raw: JSON string as stored in the row store (may be None)

    Returns:
        List of genre names
    """
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug(f"Skipping unparseable genre list: {raw!r}")
        return []
    if not isinstance(value, list):
        return []
    return [g for g in value if isinstance(g, str) and g]
