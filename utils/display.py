"""
Display and logging utilities for Film Roulette.
Handles colored output and formatting of results for the terminal.
"""

import logging
from typing import Dict, List

# ANSI color codes
RED = '\033[91m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
CYAN = '\033[96m'
RESET = '\033[0m'

LOGGER_NAME = 'film_roulette'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels"""

    LEVEL_COLORS = {
        logging.DEBUG: CYAN,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def format(self, record):
        # Color a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, '')
        record.levelname = f"{color}{record.levelname}{RESET}"
        return super().format(record)


def setup_logging(debug: bool = False, config: dict = None) -> logging.Logger:
    """
    Configure logging for the command line.

    Args:
        debug: If True, set level to DEBUG. Otherwise use config or default to WARNING.
        config: Optional config dict that may contain logging.level setting.

    Returns:
        Configured logger instance.
    """
    # Determine log level
    if debug:
        level = logging.DEBUG
    elif config and (config.get('logging') or {}).get('level'):
        level_str = config['logging']['level'].upper()
        level = getattr(logging, level_str, logging.WARNING)
    else:
        level = logging.WARNING

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(
        fmt='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Remove existing handlers to avoid duplicates
    root_logger.handlers = []
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    return logger


def print_status(message: str, level: str = "info"):
    """Print a status message with appropriate color and log it"""
    logger = logging.getLogger(LOGGER_NAME)
    if level == "success":
        print(f"{GREEN}✓ {message}{RESET}")
        logger.info(message)
    elif level == "warning":
        log_warning(message)
    elif level == "error":
        log_error(message)
    else:
        print(message)
        logger.info(message)


def log_warning(message: str):
    """Log warning and print with yellow color"""
    logging.getLogger(LOGGER_NAME).warning(message)
    print(f"{YELLOW}{message}{RESET}")


def log_error(message: str):
    """Log error and print with red color"""
    logging.getLogger(LOGGER_NAME).error(message)
    print(f"{RED}{message}{RESET}")


def format_genres(genres: List[Dict]) -> str:
    """Format a genre list as 'id  name' lines."""
    return '\n'.join(f"  {YELLOW}{g['id']:>6}{RESET}  {g['name']}" for g in genres)


def format_recommendation(recommendation: Dict, skipped: List[str] = None) -> str:
    """
    Format a recommendation for display output.

    Args:
        recommendation: Dict in the response shape (movieId, title, overview,
            posterUrl and optional genres, videos, watchProviders)
        skipped: Details that could not be loaded

    Returns:
        Formatted string for display
    """
    lines = [f"{CYAN}{recommendation.get('title', 'Unknown')}{RESET} (TMDB {recommendation.get('movieId')})"]

    genres = recommendation.get('genres')
    if genres:
        lines.append(f"  {YELLOW}Genres:{RESET} {', '.join(genres)}")

    overview = recommendation.get('overview')
    if overview:
        # Truncate long overviews
        if len(overview) > 300:
            overview = overview[:297] + "..."
        lines.append(f"  {overview}")

    if recommendation.get('posterUrl'):
        lines.append(f"  {YELLOW}Poster:{RESET} {recommendation['posterUrl']}")

    for video in recommendation.get('videos') or []:
        lines.append(f"  {YELLOW}Trailer:{RESET} {video['name']} - https://www.youtube.com/watch?v={video['key']}")

    providers = recommendation.get('watchProviders') or {}
    for provider_type, label in (('flatrate', 'Stream'), ('rent', 'Rent'), ('buy', 'Buy')):
        names = [p['provider_name'] for p in providers.get(provider_type) or []]
        if names:
            lines.append(f"  {YELLOW}{label}:{RESET} {', '.join(names)}")

    if skipped:
        lines.append(f"  {YELLOW}Not available:{RESET} {', '.join(s.replace('_', ' ') for s in skipped)}")

    return '\n'.join(lines)


def format_movie_list(movies: List[Dict], show_rating: bool = False) -> str:
    """Format watched or recommended movie rows, one per line."""
    if not movies:
        return f"{YELLOW}No movies yet.{RESET}"

    lines = []
    for i, movie in enumerate(movies, 1):
        line = f"{i}. {CYAN}{movie['title']}{RESET} (TMDB {movie['movieId']})"
        if show_rating:
            rating = movie.get('rating')
            line += f" - {rating}/5" if rating else " - not rated"
        if movie.get('genres'):
            line += f"  [{', '.join(movie['genres'])}]"
        lines.append(line)
    return '\n'.join(lines)


def format_genre_suggestion(suggestion: Dict) -> str:
    """Format a genre suggestion with reasons."""
    lines = [suggestion.get('analysis', ''), ""]
    for genre in suggestion.get('suggestedGenres', []):
        lines.append(f"  {CYAN}{genre['name']}{RESET} (id {genre['id']}): {genre['reason']}")
    return '\n'.join(lines)


def format_analysis(result: Dict) -> str:
    """Format a viewing analysis: stats first, then the narrative."""
    stats = result.get('ratingStats', {})
    lines = [
        f"{CYAN}Movies watched:{RESET} {stats.get('totalMovies', 0)}",
        f"{CYAN}Average rating:{RESET} {stats.get('averageRating', 0)}",
        f"{CYAN}Ratings:{RESET} {stats.get('highlyRated', 0)} high, "
        f"{stats.get('mediumRated', 0)} medium, {stats.get('lowRated', 0)} low",
    ]

    genre_stats = result.get('genreStats') or []
    if genre_stats:
        lines.append(f"{CYAN}Genres:{RESET}")
        for stat in genre_stats:
            lines.append(f"  {stat['genre']}: {stat['count']} ({stat['percentage']}%), "
                         f"average {stat['averageRating']}")

    lines += ["", result.get('analysis', '')]

    recommendations = result.get('recommendations') or []
    if recommendations:
        lines += ["", f"{YELLOW}Recommendations:{RESET}"]
        lines += [f"  - {r}" for r in recommendations]
    return '\n'.join(lines)


def format_review_summary(summary: Dict) -> str:
    """Format an AI review summary."""
    lines = [
        f"{CYAN}Sentiment:{RESET} {summary.get('sentiment', 'neutral')}",
        summary.get('summary', ''),
    ]
    lines += [f"  - {p}" for p in summary.get('keyPoints', [])]
    return '\n'.join(lines)


def format_todos(todos: List[Dict]) -> str:
    """Format todo items with a check mark for completed ones."""
    if not todos:
        return f"{YELLOW}Nothing to do.{RESET}"
    return '\n'.join(
        f"{t['id']:>3}. [{'x' if t['completed'] else ' '}] {t['title']}" for t in todos
    )
