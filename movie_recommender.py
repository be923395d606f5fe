#!/usr/bin/env python3
"""
Film Roulette - random movie recommendations by genre.

Usage:
    python movie_recommender.py set-key <TMDB key or token>
    python movie_recommender.py genres
    python movie_recommender.py recommend --include 28 35 --exclude 27
    python movie_recommender.py suggest comfort
    python movie_recommender.py analyze

Run with --help for the full command list.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from utils.cli import main


if __name__ == "__main__":
    sys.exit(main())
