"""
Board Routes Module
===================
REST API endpoints exposing the built scoreboard, read-only.

Endpoints:
- GET /api/board/                                  - Board summary
- GET /api/board/posts?sort=<key>&order=asc|desc   - Posts with statistics
- GET /api/board/posts/<id>?sort=<key>&order=...   - One post with its scores
- GET /api/board/posts/<id>/histogram/<dimension>  - Bucket counts of a dimension
- GET /api/board/scores?sort=<key>&order=...       - Every normalized score

Statistics of an unrated post are NaN and are returned as null.
"""

from flask import Blueprint, request, jsonify, current_app

from ..models import Board, Dimension
from ..scoring import PostRanker, PostSortKey, ScoreSortKey
from ..logging_config import get_board_logger

logger = get_board_logger("api")

board_bp = Blueprint('board', __name__)

_ranker = PostRanker()


def _board() -> Board:
    return current_app.board


def _ascending(default: bool) -> bool:
    order = request.args.get('order')
    if order is None:
        return default
    if order not in ('asc', 'desc'):
        raise ValueError(f"order must be 'asc' or 'desc', got '{order}'")
    return order == 'asc'


def _score_dict(board: Board, score) -> dict:
    data = score.to_dict()
    data['post_title'] = board.post(score.post_id).title
    return data


@board_bp.route('/', methods=['GET'])
def board_summary():
    """Summary of the built board (run id, counts, raters)."""
    return jsonify(_board().summary()), 200


@board_bp.route('/posts', methods=['GET'])
def list_posts():
    """
    List every post with its statistics.

    Query:
        sort: a PostSortKey value (default: title)
        order: asc or desc (default: asc)
    """
    try:
        key = PostSortKey(request.args.get('sort', PostSortKey.TITLE.value))
        ascending = _ascending(default=True)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    ranked = _ranker.rank(_board().entries, key, ascending)
    return jsonify({
        'sort': key.value,
        'order': 'asc' if ascending else 'desc',
        'posts': [entry.summary_dict() for entry in ranked],
    }), 200


@board_bp.route('/posts/<int:post_id>', methods=['GET'])
def get_post(post_id: int):
    """
    One post with its statistics and scores.

    Query:
        sort: a ScoreSortKey value for the scores (default: owner)
        order: asc or desc (default: asc)
    """
    board = _board()
    try:
        entry = board.entry(post_id)
    except IndexError:
        return jsonify({'error': f'Post {post_id} not found'}), 404

    try:
        key = ScoreSortKey(request.args.get('sort', ScoreSortKey.OWNER.value))
        ascending = _ascending(default=True)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    data = entry.summary_dict()
    ordered = _ranker.sort_scores(entry.scores, key, ascending, posts=board.posts)
    data['scores'] = [s.to_dict() for s in ordered]
    return jsonify(data), 200


@board_bp.route('/posts/<int:post_id>/histogram/<dimension>', methods=['GET'])
def get_histogram(post_id: int, dimension: str):
    """Histogram bucket counts of one dimension of one post."""
    board = _board()
    try:
        entry = board.entry(post_id)
    except IndexError:
        return jsonify({'error': f'Post {post_id} not found'}), 404

    try:
        dim = Dimension(dimension)
    except ValueError:
        return jsonify({'error': f'Unknown dimension: {dimension}'}), 400

    buckets = entry.histogram(dim)
    return jsonify({
        'post_id': post_id,
        'dimension': dim.value,
        'buckets': [{'bucket': b, 'count': c} for b, c in buckets.items()],
    }), 200


@board_bp.route('/scores', methods=['GET'])
def list_scores():
    """
    Every normalized score on the board.

    Query:
        sort: a ScoreSortKey value (default: post, by title)
        order: asc or desc (default: asc)
    """
    board = _board()
    try:
        key = ScoreSortKey(request.args.get('sort', ScoreSortKey.POST.value))
        ascending = _ascending(default=True)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    ordered = _ranker.sort_scores(board.scores, key, ascending, posts=board.posts)
    return jsonify({
        'sort': key.value,
        'order': 'asc' if ascending else 'desc',
        'scores': [_score_dict(board, s) for s in ordered],
    }), 200
