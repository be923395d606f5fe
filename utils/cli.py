"""
Command line interface for Film Roulette.
Wires config, the row store and the service clients to the recommenders.
"""

import argparse
import json
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from .ai import create_ai_client
from .api_client import APIError
from .config import DEFAULT_CONFIG_PATH, ConfigurationError, __version__, get_current_user, load_config
from .display import (
    format_analysis,
    format_genre_suggestion,
    format_genres,
    format_movie_list,
    format_recommendation,
    format_review_summary,
    format_todos,
    log_error,
    log_warning,
    print_status,
    setup_logging,
)
from .helpers import get_project_root
from .storage import MovieStore, StorageError, create_movie_store
from .tmdb import create_tmdb_client

from recommenders.analysis import WatchAnalysisError, WatchAnalyzer
from recommenders.history import RecommendationLog, WatchHistory
from recommenders.reviews import ReviewAnalysisError, ReviewSummarizer
from recommenders.selector import MovieSelector, NoMoviesFoundError
from recommenders.suggestions import GenreSuggester

# (result, human readable text)
CommandOutput = Tuple[object, str]


def cmd_set_key(args, config: Dict, store: MovieStore) -> CommandOutput:
    store.set_api_key(args.api_key.strip())
    return {'success': True}, "TMDB API key saved."


def cmd_genres(args, config: Dict, store: MovieStore) -> CommandOutput:
    genres = create_tmdb_client(config, store).list_genres()
    return {'genres': genres}, format_genres(genres)


def cmd_recommend(args, config: Dict, store: MovieStore) -> CommandOutput:
    selector = MovieSelector(create_tmdb_client(config, store), store)
    recommendation = selector.recommend(args.include, args.exclude)
    result = recommendation.to_dict()
    return result, format_recommendation(result, skipped=list(recommendation.failures))


def cmd_reviews(args, config: Dict, store: MovieStore) -> CommandOutput:
    summarizer = ReviewSummarizer(create_tmdb_client(config, store), create_ai_client(config))
    summary = summarizer.summarize(args.movie_id)
    return summary, format_review_summary(summary)


def cmd_recommended(args, config: Dict, store: MovieStore) -> CommandOutput:
    movies = RecommendationLog(store).list()
    return {'movies': movies}, format_movie_list(movies)


def cmd_watched(args, config: Dict, store: MovieStore) -> CommandOutput:
    movies = WatchHistory(store).list()
    return {'movies': movies}, format_movie_list(movies, show_rating=True)


def cmd_watch(args, config: Dict, store: MovieStore) -> CommandOutput:
    result = WatchHistory(store).add(args.movie_id, args.title, args.poster, args.genres)
    return result, f"Added '{args.title}' to your watched movies."


def cmd_unwatch(args, config: Dict, store: MovieStore) -> CommandOutput:
    result = WatchHistory(store).remove(args.movie_id)
    return result, f"Removed movie {args.movie_id} from your watched movies."


def cmd_rate(args, config: Dict, store: MovieStore) -> CommandOutput:
    result = WatchHistory(store).rate(args.movie_id, args.rating)
    return result, result['message']


def cmd_suggest(args, config: Dict, store: MovieStore) -> CommandOutput:
    # Only the 'new' strategy talks to TMDB
    tmdb = create_tmdb_client(config, store) if args.preference == 'new' else None
    suggestion = GenreSuggester(store, tmdb).suggest(args.preference)
    return suggestion, format_genre_suggestion(suggestion)


def cmd_analyze(args, config: Dict, store: MovieStore) -> CommandOutput:
    result = WatchAnalyzer(store, create_ai_client(config)).analyze()
    return result, format_analysis(result)


def cmd_todo(args, config: Dict, store: MovieStore) -> CommandOutput:
    if args.todo_command == 'add':
        todo_id = store.add_todo(args.title)
        return {'success': True, 'id': todo_id}, f"Added todo {todo_id}."
    if args.todo_command == 'toggle':
        completed = store.toggle_todo(args.todo_id)
        state = "done" if completed else "open"
        return {'success': True, 'completed': completed}, f"Todo {args.todo_id} is now {state}."
    if args.todo_command == 'remove':
        store.delete_todo(args.todo_id)
        return {'success': True}, f"Removed todo {args.todo_id}."
    todos = store.list_todos()
    return {'todos': todos}, format_todos(todos)


def cmd_whoami(args, config: Dict, store: MovieStore) -> CommandOutput:
    user = get_current_user(config)
    if user is None:
        return {'user': None}, "No user configured."
    email = f" <{user['email']}>" if user.get('email') else ""
    return {'user': user}, f"{user['name']}{email}"


COMMANDS: Dict[str, Callable[..., CommandOutput]] = {
    'set-key': cmd_set_key,
    'genres': cmd_genres,
    'recommend': cmd_recommend,
    'reviews': cmd_reviews,
    'recommended': cmd_recommended,
    'watched': cmd_watched,
    'watch': cmd_watch,
    'unwatch': cmd_unwatch,
    'rate': cmd_rate,
    'suggest': cmd_suggest,
    'analyze': cmd_analyze,
    'todo': cmd_todo,
    'whoami': cmd_whoami,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog='film-roulette',
        description='Random movie recommendations by genre, with watch history and AI insights.',
    )
    parser.add_argument('--config', help='Path to config.yml (default: config/config.yml)')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--json', action='store_true', help='Print raw JSON results')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('set-key', help='Save the TMDB API key or read access token')
    p.add_argument('api_key')

    sub.add_parser('genres', help='List TMDB movie genres')

    p = sub.add_parser('recommend', help='Recommend a random movie')
    p.add_argument('--include', type=int, nargs='+', required=True, metavar='GENRE_ID',
                   help='1 to 3 genre IDs the movie must have')
    p.add_argument('--exclude', type=int, nargs='*', default=[], metavar='GENRE_ID',
                   help='Genre IDs the movie must not have')

    p = sub.add_parser('reviews', help='Summarize a movie\'s reviews with AI')
    p.add_argument('movie_id', type=int)

    sub.add_parser('recommended', help='List previously recommended movies')
    sub.add_parser('watched', help='List watched movies')

    p = sub.add_parser('watch', help='Mark a movie as watched')
    p.add_argument('movie_id', type=int)
    p.add_argument('title')
    p.add_argument('--poster', help='Poster URL')
    p.add_argument('--genres', nargs='*', help='Genre names')

    p = sub.add_parser('unwatch', help='Remove a movie from the watched list')
    p.add_argument('movie_id', type=int)

    p = sub.add_parser('rate', help='Rate a watched movie (1-5)')
    p.add_argument('movie_id', type=int)
    p.add_argument('rating', type=int)

    p = sub.add_parser('suggest', help='Suggest genres from your watch history')
    p.add_argument('preference', choices=['comfort', 'new'])

    sub.add_parser('analyze', help='Analyze your viewing habits with AI')

    p = sub.add_parser('todo', help='Manage the todo list')
    todo = p.add_subparsers(dest='todo_command')
    todo.add_parser('list')
    t = todo.add_parser('add')
    t.add_argument('title')
    for name in ('toggle', 'remove'):
        t = todo.add_parser(name)
        t.add_argument('todo_id', type=int)

    sub.add_parser('whoami', help='Show the configured user')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line interface.

    Args:
        argv: Arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    config_path = args.config or os.path.join(get_project_root(), DEFAULT_CONFIG_PATH)

    try:
        config = load_config(config_path)
    except Exception as e:
        log_error(f"Could not load config from {config_path}: {e}")
        return 1

    logger = setup_logging(debug=args.debug, config=config)
    logger.debug(f"Film Roulette v{__version__}, config {config_path}")

    if not os.path.exists(config_path):
        message = f"Config file {config_path} not found, using defaults"
        # Keep stdout parseable in JSON mode
        if args.json:
            logger.warning(message)
        else:
            log_warning(message)

    try:
        with create_movie_store(config) as store:
            result, text = COMMANDS[args.command](args, config, store)
    except (ConfigurationError, APIError, StorageError, ValueError,
            NoMoviesFoundError, WatchAnalysisError, ReviewAnalysisError) as e:
        logger.debug("Command failed", exc_info=True)
        log_error(str(e))
        return 1

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    elif args.command in ('set-key', 'watch', 'unwatch', 'rate'):
        print_status(text, "success")
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
