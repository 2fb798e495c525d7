"""
Command-Line Tests
==================
Tests for the post selection and JSON output of scripts/run_board.py.
"""

import io
import json
import math
import os
import sys
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

# Add parent and scripts to path for imports
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
sys.path.insert(0, BACKEND_DIR)
sys.path.insert(0, os.path.join(BACKEND_DIR, "scripts"))

from run_board import main, select_posts
from scoreboard.config import reset_config
from scoreboard.models import Board, Post, Score
from scoreboard.scoring import aggregate_scores


def create_board() -> Board:
    """Posts A and B are rated, C is not; A has the best composite."""
    posts = (
        Post(title="A", author="Lin", url="u0"),
        Post(title="B", author="Wu", url="u1"),
        Post(title="C", author="Zhao", url="u2"),
    )
    scores = (
        Score(owner="alice", post_id=0, literary=0.5, thinking=0.5, mozheng=0.5),
        Score(owner="alice", post_id=1, literary=-0.5, thinking=-0.5, mozheng=-0.5),
        Score(owner="bob", post_id=0, literary=-0.5, thinking=0.5, mozheng=0.5),
        Score(owner="bob", post_id=1, literary=0.5, thinking=-0.5, mozheng=-0.5),
    )
    return Board(posts=posts, scores=scores, entries=tuple(aggregate_scores(posts, scores)))


def write_dataset(directory: Path) -> None:
    catalog = [{"title": t, "author": "Lin", "url": f"https://example.org/{t}"} for t in "ABC"]
    (directory / "posts.json").write_text(json.dumps(catalog), encoding='utf-8')

    scores_dir = directory / "scores"
    scores_dir.mkdir()
    (scores_dir / "alice.csv").write_text(
        "title,literary,thinking,mozheng\nA,5,4,3\nB,1,2,1\n", encoding='utf-8'
    )
    (scores_dir / "bob.csv").write_text(
        "title,literary,thinking,mozheng\nA,2,5,4\nB,4,1,2\n", encoding='utf-8'
    )


# =============================================================================
# SELECTION TESTS
# =============================================================================

def test_top_skips_unrated_posts():
    """The best-first top listing never starts with an unrated post."""
    board = create_board()

    top = select_posts(board, "sum_avg", ascending=False, top=1)
    assert [e.post.title for e in top] == ["A"]

    everything = select_posts(board, "mozheng_avg", ascending=False, top=10)
    assert [e.post.title for e in everything] == ["A", "B"]

    print("[PASS] Top listing test passed")


def test_top_ascending_skips_unrated_posts():
    board = create_board()

    worst = select_posts(board, "sum_avg", ascending=True, top=3)
    assert [e.post.title for e in worst] == ["B", "A"]

    print("[PASS] Ascending top listing test passed")


def test_full_listing_keeps_unrated_posts():
    """Without --top every post is listed; descending puts unrated first."""
    board = create_board()

    listing = select_posts(board, "sum_avg", ascending=False)
    assert [e.post.title for e in listing] == ["C", "A", "B"]
    assert math.isnan(listing[0].sum_avg())

    print("[PASS] Full listing test passed")


# =============================================================================
# END TO END
# =============================================================================

def test_main_prints_top_post():
    with tempfile.TemporaryDirectory() as tmpdir:
        write_dataset(Path(tmpdir))

        out = io.StringIO()
        try:
            with redirect_stdout(out):
                status = main(["--data-dir", tmpdir, "--top", "1"])
        finally:
            reset_config()

    assert status == 0
    output = json.loads(out.getvalue())
    assert output['sort'] == 'sum_avg'
    assert output['raters'] == ['alice', 'bob']
    assert [p['post']['title'] for p in output['posts']] == ["A"]
    assert output['posts'][0]['score_count'] == 2

    print("[PASS] CLI top post test passed")


def test_main_reports_build_failure():
    """A missing data directory exits with status 1."""
    with tempfile.TemporaryDirectory() as tmpdir:
        try:
            status = main(["--data-dir", str(Path(tmpdir) / "missing")])
        finally:
            reset_config()

    assert status == 1

    print("[PASS] CLI build failure test passed")


def run_all_tests():
    """Run all command-line tests."""
    print("\n" + "="*60)
    print("COMMAND-LINE TESTS")
    print("="*60 + "\n")

    test_top_skips_unrated_posts()
    test_top_ascending_skips_unrated_posts()
    test_full_listing_keeps_unrated_posts()
    test_main_prints_top_post()
    test_main_reports_build_failure()

    print("\n" + "="*60)
    print("ALL COMMAND-LINE TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
