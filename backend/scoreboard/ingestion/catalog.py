"""
Post Catalog Loader
===================
Reads the post catalog from a JSON array of {title, author, url} objects.

The catalog is loaded once, before any score is read; a post's position in
the array is its id for the rest of the run.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from ..models import Post

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'author', 'url')


class IngestionError(Exception):
    """Raised when the catalog or a rater file cannot be loaded."""


def load_catalog(path: Union[str, Path]) -> Tuple[Post, ...]:
    """
    Load the post catalog.

    Args:
        path: Path to the catalog JSON file

    Returns:
        Posts in file order

    Raises:
        IngestionError: If the file is missing, is not a JSON array, or an
                        entry lacks a required field
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise IngestionError(f"Catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise IngestionError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise IngestionError(f"Catalog {path} must be a JSON array of posts")

    posts = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise IngestionError(f"Catalog entry {index} is not an object")
        missing = [k for k in REQUIRED_FIELDS if k not in entry]
        if missing:
            raise IngestionError(
                f"Catalog entry {index} is missing {', '.join(missing)}"
            )
        posts.append(Post(
            title=str(entry['title']),
            author=str(entry['author']),
            url=str(entry['url']),
        ))

    titles = [p.title for p in posts]
    if len(set(titles)) != len(titles):
        # Lookups resolve to the first match
        logger.warning(f"Catalog {path} contains duplicate titles")

    logger.info(f"Loaded {len(posts)} posts from {path}")
    return tuple(posts)


def find_post(catalog: Sequence[Post], title: str) -> Optional[int]:
    """Index of the first post with exactly this title, or None."""
    for post_id, post in enumerate(catalog):
        if post.title == title:
            return post_id
    return None
