"""
Result types separating hard failures from best-effort ones.

A hard failure aborts the operation (the exception propagates). A soft
failure is logged, recorded on the result, and the affected field is
simply left out.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger('film_roulette')


@dataclass
class SoftResult:
    """Outcome of a best-effort sub-call."""

    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def soft_call(label: str, func: Callable, *args, **kwargs) -> SoftResult:
    """
    Run a best-effort sub-call.

    Args:
        label: What is being fetched/written, for the log line
        func: Callable to run
        *args, **kwargs: Passed through to func

    Returns:
        SoftResult with the value, or with the error text if func raised
    """
    try:
        return SoftResult(value=func(*args, **kwargs))
    except Exception as e:
        logger.warning(f"Could not {label}: {e}")
        return SoftResult(error=str(e))


@dataclass
class Recommendation:
    """
    A picked movie plus whatever enrichment could be fetched.

    Enrichment fields are None when their sub-call failed (the reason
    is in `failures`) or returned nothing.
    """

    movie_id: int
    title: str
    overview: str = ""
    poster_url: str = ""
    genres: Optional[List[str]] = None
    videos: Optional[List[Dict]] = None
    watch_providers: Optional[Dict[str, List[Dict]]] = None
    failures: Dict[str, str] = field(default_factory=dict)
    saved: bool = False

    @property
    def degraded(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> Dict:
        """Serialize to the response shape; absent fields are omitted."""
        data = {
            'movieId': self.movie_id,
            'title': self.title,
            'overview': self.overview,
            'posterUrl': self.poster_url,
        }
        if self.genres:
            data['genres'] = self.genres
        if self.videos:
            data['videos'] = self.videos
        if self.watch_providers:
            data['watchProviders'] = self.watch_providers
        return data
