#!/usr/bin/env python3
"""
Run Board Script
================
Command-line interface for building the scoreboard.

Usage:
    python scripts/run_board.py --data-dir data
    python scripts/run_board.py --data-dir data --sort sum_avg --top 10
    python scripts/run_board.py --data-dir data --on-failure drop
    python scripts/run_board.py --data-dir data --serve
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoreboard.config import AppConfig, FAILURE_POLICIES, get_config, set_config, apply_environment_overrides
from scoreboard.logging_config import get_board_logger
from scoreboard.pipeline import build_board
from scoreboard.models import Board, PostWithScores
from scoreboard.scoring import PostRanker, PostSortKey

logger = get_board_logger("cli", log_to_file=False)


def select_posts(
    board: Board,
    sort: str,
    ascending: bool = False,
    top: Optional[int] = None
) -> List[PostWithScores]:
    """
    Posts to print, in display order.

    A --top listing only counts rated posts; unrated posts have no
    statistics to rank on.
    """
    ranker = PostRanker()
    key = PostSortKey(sort)

    if top is None:
        return ranker.rank(board.entries, key, ascending=ascending)
    if not ascending:
        return ranker.top_k(board.entries, top, key)

    rated = [e for e in board.entries if e.scores]
    return ranker.rank(rated, key, ascending=True)[:top]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Build the scoreboard from the catalog and rater files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print the board ranked by average composite score
    python scripts/run_board.py --data-dir data

    # Ten best posts by mozheng average
    python scripts/run_board.py --data-dir data --sort mozheng_avg --top 10

    # Leave out raters whose scores cannot be normalized
    python scripts/run_board.py --data-dir data --on-failure drop

    # Serve the board over HTTP
    python scripts/run_board.py --data-dir data --serve
        """
    )

    parser.add_argument(
        '--data-dir', '-d',
        type=str,
        default=None,
        help='Directory holding posts.json and scores/ (default: ./data)'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Configuration JSON file'
    )

    parser.add_argument(
        '--sort', '-s',
        type=str,
        choices=[k.value for k in PostSortKey],
        default=PostSortKey.SUM_AVG.value,
        help='Column to rank by (default: sum_avg)'
    )

    parser.add_argument(
        '--ascending',
        action='store_true',
        help='Rank in ascending order'
    )

    parser.add_argument(
        '--top', '-k',
        type=int,
        default=None,
        help='Only print the first K posts'
    )

    parser.add_argument(
        '--on-failure',
        type=str,
        choices=FAILURE_POLICIES,
        default=None,
        help='What to do with a rater that cannot be normalized'
    )

    parser.add_argument(
        '--parallel',
        action='store_true',
        help='Scale raters on a thread pool'
    )

    parser.add_argument(
        '--serve',
        action='store_true',
        help='Start the read-only API instead of printing'
    )

    args = parser.parse_args(argv)

    config = AppConfig.load(args.config) if args.config else get_config()
    apply_environment_overrides(config)

    if args.data_dir:
        config.paths.base_dir = Path(args.data_dir)
    if args.on_failure:
        config.scaling.on_failure = args.on_failure
    if args.parallel:
        config.scaling.parallel = True

    set_config(config)

    try:
        board = build_board(config)
    except RuntimeError as e:
        logger.error(str(e))
        return 1

    if args.serve:
        from scoreboard.app import create_app
        app = create_app(config_override=config, board=board)
        app.run(debug=config.flask.debug, host=config.flask.host, port=config.flask.port)
        return 0

    ranked = select_posts(board, args.sort, args.ascending, args.top)

    output = board.summary()
    output['sort'] = args.sort
    output['posts'] = [entry.summary_dict() for entry in ranked]
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
