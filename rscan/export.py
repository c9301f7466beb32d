"""Score table export."""
import csv
import io
from pathlib import Path
from typing import Optional, Union

from rscan.scoring import ScoreMatrix
from rscan.sequences import Alignment


def export(alignment: Alignment, matrix: ScoreMatrix) -> list[list]:
    """One row per sequence: the label followed by its scores in position order."""
    return [[alignment.label(i)] + list(scores) for i, scores in enumerate(matrix)]


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return repr(value)
    return str(value)


def write_csv(rows: list[list], dest: Union[str, Path, io.TextIOBase]) -> None:
    """Write score rows as CSV; unscored positions become empty cells."""
    if isinstance(dest, (str, Path)):
        with open(dest, "w", newline="") as f:
            write_csv(rows, f)
        return
    writer = csv.writer(dest)
    for row in rows:
        writer.writerow([row[0]] + [_cell(v) for v in row[1:]])


def rows_to_csv(rows: list[list]) -> str:
    buffer = io.StringIO()
    write_csv(rows, buffer)
    return buffer.getvalue()


def read_csv(source: Union[str, Path, io.TextIOBase]) -> list[list]:
    """Read rows written by write_csv back into labels and float scores."""
    if isinstance(source, (str, Path)):
        with open(source, newline="") as f:
            return read_csv(f)
    rows = []
    for record in csv.reader(source):
        if not record:
            continue
        scores: list[Optional[float]] = [float(v) if v else None for v in record[1:]]
        rows.append([record[0]] + scores)
    return rows
