"""
SQLite row store for Film Roulette.
Holds the TMDB credential, the recommended and watched movie logs, and a todo list.
"""

import json
import logging
import os
import sqlite3
import time
from typing import Dict, List, Optional

from .config import get_storage_config

logger = logging.getLogger('film_roulette')

# Single-row credential table key
API_KEY_ROW_ID = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS tmdb_api_key (
    id INTEGER PRIMARY KEY,
    api_key TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS recommended_movies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    movie_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    poster TEXT,
    genres TEXT,
    created_at INTEGER
);
CREATE TABLE IF NOT EXISTS watched_movies (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    movie_id INTEGER NOT NULL UNIQUE,
    title TEXT NOT NULL,
    poster TEXT,
    genres TEXT,
    rating INTEGER,
    created_at INTEGER
);
CREATE TABLE IF NOT EXISTS todos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0
);
"""


class StorageError(Exception):
    """Base class for row store domain errors."""
    pass


class DuplicateMovieError(StorageError):
    """Raised when adding a movie that is already in the watched list."""
    pass


class RowNotFoundError(StorageError):
    """Raised when operating on a row that does not exist."""
    pass


class MovieNotFoundError(RowNotFoundError):
    """Raised when a movie is not in the requested log."""
    pass


class TodoNotFoundError(RowNotFoundError):
    """Raised when a todo item does not exist."""
    pass


def encode_genres(genres: Optional[List[str]]) -> Optional[str]:
    """Serialize a genre list for storage (None for empty lists)."""
    if not genres:
        return None
    return json.dumps(list(genres), ensure_ascii=False)


class MovieStore:
    """
    Row store backed by a single SQLite database file.

    The schema is ensured lazily when the store is opened. Rows come
    back as plain dicts with the column names used in the tables.
    """

    def __init__(self, path: str = ':memory:'):
        """
        Open (and create if needed) the database.

        Args:
            path: Database file path, or ':memory:' for a throwaway store
        """
        self.path = path
        if path != ':memory:':
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        self.conn = sqlite3.connect(path)
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @staticmethod
    def _now() -> int:
        return int(time.time())

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        cursor = self.conn.execute(sql, params)
        self.conn.commit()
        return cursor

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict]:
        return [dict(row) for row in self.conn.execute(sql, params).fetchall()]

    # Credential

    def get_api_key(self) -> Optional[str]:
        """Get the saved TMDB credential, if any."""
        row = self.conn.execute(
            "SELECT api_key FROM tmdb_api_key WHERE id = ?", (API_KEY_ROW_ID,)
        ).fetchone()
        return row['api_key'] if row else None

    def set_api_key(self, api_key: str) -> None:
        """Insert or replace the saved TMDB credential."""
        self._execute(
            "INSERT INTO tmdb_api_key (id, api_key) VALUES (?, ?) "
            "ON CONFLICT(id) DO UPDATE SET api_key = excluded.api_key",
            (API_KEY_ROW_ID, api_key),
        )

    # Recommended movies (append-only)

    def insert_recommended_movie(self, movie_id: int, title: str,
                                 poster: Optional[str] = None,
                                 genres: Optional[List[str]] = None) -> int:
        """
        Append a row to the recommended-movies log.

        Returns:
            The new row ID
        """
        cursor = self._execute(
            "INSERT INTO recommended_movies (movie_id, title, poster, genres, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (movie_id, title, poster or None, encode_genres(genres), self._now()),
        )
        return cursor.lastrowid

    def list_recommended_movies(self, newest_first: bool = False) -> List[Dict]:
        """List the recommended-movies log ordered by creation time."""
        order = "DESC" if newest_first else "ASC"
        return self._fetch_all(
            f"SELECT * FROM recommended_movies ORDER BY created_at {order}, id {order}"
        )

    # Watched movies

    def get_watched_movie(self, movie_id: int) -> Optional[Dict]:
        """Get the watched row for a movie, or None."""
        row = self.conn.execute(
            "SELECT * FROM watched_movies WHERE movie_id = ? LIMIT 1", (movie_id,)
        ).fetchone()
        return dict(row) if row else None

    def insert_watched_movie(self, movie_id: int, title: str,
                             poster: Optional[str] = None,
                             genres: Optional[List[str]] = None) -> int:
        """
        Add a movie to the watched list.

        Returns:
            The new row ID

        Raises:
            DuplicateMovieError: If the movie is already in the list
        """
        if self.get_watched_movie(movie_id) is not None:
            raise DuplicateMovieError(f"Movie {movie_id} is already in the watched list")
        try:
            cursor = self._execute(
                "INSERT INTO watched_movies (movie_id, title, poster, genres, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (movie_id, title, poster or None, encode_genres(genres), self._now()),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateMovieError(f"Movie {movie_id} is already in the watched list") from e
        return cursor.lastrowid

    def list_watched_movies(self, newest_first: bool = False) -> List[Dict]:
        """List watched movies ordered by creation time."""
        order = "DESC" if newest_first else "ASC"
        return self._fetch_all(
            f"SELECT * FROM watched_movies ORDER BY created_at {order}, id {order}"
        )

    def delete_watched_movie(self, movie_id: int) -> None:
        """
        Remove a movie from the watched list.

        Raises:
            MovieNotFoundError: If the movie is not in the list
        """
        cursor = self._execute("DELETE FROM watched_movies WHERE movie_id = ?", (movie_id,))
        if cursor.rowcount == 0:
            raise MovieNotFoundError(f"Movie {movie_id} is not in the watched list")

    def update_watched_rating(self, movie_id: int, rating: int) -> None:
        """
        Set the rating of a watched movie.

        Raises:
            MovieNotFoundError: If the movie is not in the list
        """
        cursor = self._execute(
            "UPDATE watched_movies SET rating = ? WHERE movie_id = ?", (rating, movie_id)
        )
        if cursor.rowcount == 0:
            raise MovieNotFoundError(f"Movie {movie_id} is not in the watched list")

    # Todos

    def add_todo(self, title: str) -> int:
        cursor = self._execute("INSERT INTO todos (title, completed) VALUES (?, 0)", (title,))
        return cursor.lastrowid

    def list_todos(self) -> List[Dict]:
        rows = self._fetch_all("SELECT * FROM todos ORDER BY id")
        for row in rows:
            row['completed'] = bool(row['completed'])
        return rows

    def toggle_todo(self, todo_id: int) -> bool:
        """
        Flip a todo's completed flag.

        Returns:
            The new completed state

        Raises:
            TodoNotFoundError: If the todo does not exist
        """
        row = self.conn.execute("SELECT completed FROM todos WHERE id = ?", (todo_id,)).fetchone()
        if row is None:
            raise TodoNotFoundError(f"Todo {todo_id} not found")
        completed = not bool(row['completed'])
        self._execute("UPDATE todos SET completed = ? WHERE id = ?", (int(completed), todo_id))
        return completed

    def delete_todo(self, todo_id: int) -> None:
        cursor = self._execute("DELETE FROM todos WHERE id = ?", (todo_id,))
        if cursor.rowcount == 0:
            raise TodoNotFoundError(f"Todo {todo_id} not found")


def create_movie_store(config: Dict) -> MovieStore:
    """Open the row store configured under storage.database."""
    path = get_storage_config(config)['database']
    logger.debug(f"Opening database at {path}")
    return MovieStore(path)
