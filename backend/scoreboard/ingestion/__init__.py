"""
Ingestion Package
=================
Loads the post catalog and the per-rater score files.

Usage:
    from scoreboard.ingestion import load_catalog, load_rater_directory

    catalog = load_catalog("data/posts.json")
    scores_by_owner = load_rater_directory("data/scores", catalog)
"""

from .catalog import IngestionError, load_catalog, find_post
from .raters import load_rater_file, load_rater_directory, parse_rater_rows

__all__ = [
    'IngestionError',
    'load_catalog',
    'find_post',
    'load_rater_file',
    'load_rater_directory',
    'parse_rater_rows',
]
