"""
Rater File Loader
=================
Reads one CSV file per rater into Score objects.

File layout (header row required, extra columns ignored):

    title,literary,thinking,mozheng
    Some Post,4,3,5

The rater's name is the file stem. Every title must match a catalog entry
exactly (after trimming surrounding whitespace); one bad row rejects the
whole file so that scaling never sees a partial rater.

When a file rates the same title twice, the later row wins and takes the
earlier row's position.
"""

import csv
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

from .catalog import IngestionError, find_post
from ..models import Post, Score

logger = logging.getLogger(__name__)


def _parse_rating(raw: str, column: str, source: str, line: int) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise IngestionError(
            f"{source}:{line}: {column} rating '{raw}' is not a number"
        ) from e
    if not math.isfinite(value):
        raise IngestionError(f"{source}:{line}: {column} rating '{raw}' is not finite")
    return value


def parse_rater_rows(
    owner: str,
    rows: Iterable[Sequence[str]],
    catalog: Sequence[Post],
    source: str = "<rows>"
) -> List[Score]:
    """
    Resolve a rater's data rows (header already removed) against the catalog.

    Args:
        owner: Rater name
        rows: Rows of [title, literary, thinking, mozheng, ...]
        catalog: The post catalog
        source: Name used in error messages

    Returns:
        One Score per distinct rated post, in first-appearance order

    Raises:
        IngestionError: On an unknown title, a short row or a bad rating
    """
    by_post: Dict[int, Score] = {}

    # Line 1 is the header
    for line, row in enumerate(rows, start=2):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) < 4:
            raise IngestionError(f"{source}:{line}: expected 4 columns, got {len(row)}")

        title = row[0].strip()
        post_id = find_post(catalog, title)
        if post_id is None:
            raise IngestionError(f"{source}:{line}: title `{title}` not found")

        score = Score(
            owner=owner,
            post_id=post_id,
            literary=_parse_rating(row[1].strip(), 'literary', source, line),
            thinking=_parse_rating(row[2].strip(), 'thinking', source, line),
            mozheng=_parse_rating(row[3].strip(), 'mozheng', source, line),
        )

        if post_id in by_post:
            logger.warning(
                f"{source}:{line}: {owner} rated `{title}` again, keeping the later rating"
            )
        by_post[post_id] = score

    return list(by_post.values())


def load_rater_file(path: Union[str, Path], catalog: Sequence[Post]) -> List[Score]:
    """
    Load one rater's CSV file.

    Raises:
        IngestionError: If the file cannot be read or any row is invalid
    """
    path = Path(path)
    owner = path.stem

    try:
        with open(path, 'r', encoding='utf-8-sig', newline='') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header is None:
                raise IngestionError(f"{path}: file is empty")
            scores = parse_rater_rows(owner, reader, catalog, source=str(path))
    except OSError as e:
        raise IngestionError(f"Cannot read rater file {path}: {e}") from e
    except csv.Error as e:
        raise IngestionError(f"{path}: malformed CSV: {e}") from e

    logger.info(f"Loaded {len(scores)} scores for rater {owner}")
    return scores


def load_rater_directory(
    directory: Union[str, Path],
    catalog: Sequence[Post]
) -> Dict[str, List[Score]]:
    """
    Load every *.csv rater file in a directory, in filename order.

    Returns:
        Mapping of rater name to that rater's scores

    Raises:
        IngestionError: If the directory is missing or any file is invalid
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise IngestionError(f"Scores directory not found: {directory}")

    scores_by_owner: Dict[str, List[Score]] = {}
    for path in sorted(directory.glob("*.csv")):
        scores_by_owner[path.stem] = load_rater_file(path, catalog)

    if not scores_by_owner:
        logger.warning(f"No rater files in {directory}")

    return scores_by_owner
