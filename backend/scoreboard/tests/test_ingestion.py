"""
Ingestion Tests
===============
Tests for loading the post catalog and the per-rater CSV files.
"""

import json
import os
import sys
import tempfile
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from scoreboard.ingestion import (
    IngestionError,
    find_post,
    load_catalog,
    load_rater_directory,
    load_rater_file,
    parse_rater_rows,
)
from scoreboard.models import Post


HEADER = "title,literary,thinking,mozheng\n"


def create_catalog():
    return (
        Post(title="Spring", author="Lin", url="https://example.org/spring"),
        Post(title="Summer Rain", author="Wu", url="https://example.org/summer"),
        Post(title="Autumn", author="Zhao", url="https://example.org/autumn"),
    )


def write_file(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding='utf-8')
    return path


# =============================================================================
# CATALOG TESTS
# =============================================================================

def test_load_catalog():
    """Posts load in file order."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "posts.json"
        path.write_text(json.dumps([
            {"title": "Spring", "author": "Lin", "url": "u1"},
            {"title": "Autumn", "author": "Zhao", "url": "u2", "tags": ["x"]},
        ]), encoding='utf-8')

        catalog = load_catalog(path)

    assert catalog == (
        Post(title="Spring", author="Lin", url="u1"),
        Post(title="Autumn", author="Zhao", url="u2"),
    )

    print("[PASS] Load catalog test passed")


def test_catalog_errors():
    """Missing files, bad JSON and incomplete entries are rejected."""
    with tempfile.TemporaryDirectory() as tmpdir:
        directory = Path(tmpdir)
        bad_inputs = [
            write_file(directory, "broken.json", "[{"),
            write_file(directory, "object.json", '{"title": "Spring"}'),
            write_file(directory, "missing.json", '[{"title": "Spring", "author": "Lin"}]'),
            directory / "absent.json",
        ]

        for path in bad_inputs:
            try:
                load_catalog(path)
                assert False, f"expected IngestionError for {path.name}"
            except IngestionError:
                pass

    print("[PASS] Catalog error test passed")


def test_find_post():
    catalog = create_catalog()
    assert find_post(catalog, "Summer Rain") == 1
    assert find_post(catalog, "summer rain") is None
    print("[PASS] Find post test passed")


# =============================================================================
# RATER FILE TESTS
# =============================================================================

def test_load_rater_file():
    """The rater is named after the file; titles resolve to catalog ids."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_file(Path(tmpdir), "alice.csv", HEADER + (
            "Autumn,4,3,5\n"
            " Spring ,2.5,1,0\n"
        ))

        scores = load_rater_file(path, create_catalog())

    assert [s.owner for s in scores] == ["alice", "alice"]
    assert [s.post_id for s in scores] == [2, 0]
    assert (scores[1].literary, scores[1].thinking, scores[1].mozheng) == (2.5, 1.0, 0.0)

    print("[PASS] Load rater file test passed")


def test_quoted_titles_and_bom():
    """Titles with commas may be quoted; a UTF-8 BOM is ignored."""
    catalog = create_catalog() + (Post(title="Rain, Again", author="Wu", url="u"),)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "bob.csv"
        path.write_text('\ufeff' + HEADER + '"Rain, Again",1,2,3\n', encoding='utf-8')

        scores = load_rater_file(path, catalog)

    assert len(scores) == 1
    assert scores[0].post_id == 3

    print("[PASS] Quoted title test passed")


def test_unknown_title_rejects_file():
    """An unknown title fails the whole file and names the title."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_file(Path(tmpdir), "carol.csv", HEADER + (
            "Spring,1,2,3\n"
            "Winter,1,2,3\n"
        ))

        try:
            load_rater_file(path, create_catalog())
            assert False, "expected IngestionError"
        except IngestionError as e:
            assert "title `Winter` not found" in str(e)
            assert ":3:" in str(e)

    print("[PASS] Unknown title test passed")


def test_bad_ratings_rejected():
    """Non-numeric and non-finite ratings and short rows are errors."""
    rows = [
        ["Spring", "four", "3", "5"],
        ["Spring", "4", "nan", "5"],
        ["Spring", "4", "3", "inf"],
        ["Spring", "4", "3"],
    ]

    for row in rows:
        try:
            parse_rater_rows("alice", [row], create_catalog())
            assert False, f"expected IngestionError for {row}"
        except IngestionError:
            pass

    print("[PASS] Bad rating test passed")


def test_duplicate_title_last_wins():
    """A re-rated title keeps its first position with the later values."""
    rows = [
        ["Spring", "1", "1", "1"],
        ["Autumn", "2", "2", "2"],
        ["Spring", "3", "3", "3"],
    ]

    scores = parse_rater_rows("alice", rows, create_catalog())

    assert [s.post_id for s in scores] == [0, 2]
    assert scores[0].literary == 3.0

    print("[PASS] Duplicate title test passed")


def test_blank_rows_and_extra_columns():
    rows = [
        [],
        ["Spring", "1", "2", "3", "great post"],
        ["", " ", "", ""],
    ]

    scores = parse_rater_rows("alice", rows, create_catalog())

    assert len(scores) == 1
    assert scores[0].mozheng == 3.0

    print("[PASS] Blank rows test passed")


def test_empty_file_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_file(Path(tmpdir), "dave.csv", "")
        try:
            load_rater_file(path, create_catalog())
            assert False, "expected IngestionError"
        except IngestionError:
            pass

        header_only = write_file(Path(tmpdir), "erin.csv", HEADER)
        assert load_rater_file(header_only, create_catalog()) == []

    print("[PASS] Empty file test passed")


# =============================================================================
# DIRECTORY TESTS
# =============================================================================

def test_load_rater_directory():
    """Rater files load in filename order; other files are ignored."""
    with tempfile.TemporaryDirectory() as tmpdir:
        directory = Path(tmpdir)
        write_file(directory, "bob.csv", HEADER + "Autumn,1,2,3\n")
        write_file(directory, "alice.csv", HEADER + "Spring,3,2,1\nAutumn,1,1,1\n")
        write_file(directory, "notes.txt", "not a rater")

        scores_by_owner = load_rater_directory(directory, create_catalog())

    assert list(scores_by_owner) == ["alice", "bob"]
    assert len(scores_by_owner["alice"]) == 2

    print("[PASS] Load rater directory test passed")


def test_missing_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        try:
            load_rater_directory(Path(tmpdir) / "scores", create_catalog())
            assert False, "expected IngestionError"
        except IngestionError:
            pass

    print("[PASS] Missing directory test passed")


# =============================================================================
# RUN ALL TESTS
# =============================================================================

def run_all_tests():
    """Run all ingestion tests."""
    print("\n" + "="*60)
    print("INGESTION TESTS")
    print("="*60 + "\n")

    print("\n--- Catalog Tests ---")
    test_load_catalog()
    test_catalog_errors()
    test_find_post()

    print("\n--- Rater File Tests ---")
    test_load_rater_file()
    test_quoted_titles_and_bom()
    test_unknown_title_rejects_file()
    test_bad_ratings_rejected()
    test_duplicate_title_last_wins()
    test_blank_rows_and_extra_columns()
    test_empty_file_rejected()

    print("\n--- Directory Tests ---")
    test_load_rater_directory()
    test_missing_directory()

    print("\n" + "="*60)
    print("ALL INGESTION TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
