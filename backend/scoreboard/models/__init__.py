"""
Data Models Package
===================
Exports all data model classes for the scoreboard.

Usage:
    from scoreboard.models import Post, Score, PostWithScores, Board
    from scoreboard.models import Dimension
"""

from .schemas import (
    # Enums
    Dimension,

    # Base
    BaseModel,

    # Catalog and scores
    Post,
    Score,
    PostWithScores,

    # Build output
    Board,

    # Constants
    MOZHENG_WEIGHT,

    # Utilities
    json_number,
    generate_run_id,
)

__all__ = [
    # Enums
    'Dimension',

    # Base
    'BaseModel',

    # Catalog and scores
    'Post',
    'Score',
    'PostWithScores',

    # Build output
    'Board',

    # Constants
    'MOZHENG_WEIGHT',

    # Utilities
    'json_number',
    'generate_run_id',
]
