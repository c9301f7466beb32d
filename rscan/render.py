"""Color banding and paged rendering of scored alignments."""
import json
import math
from pathlib import Path
from typing import Optional, Sequence

from rscan.errors import ConfigurationError
from rscan.schemas import Cell, ColorScheme, Page, PageLine
from rscan.scoring import ScoreMatrix
from rscan.sequences import Alignment

COLOR_SCHEMES_DIR = Path(__file__).parent / "color_schemes"
DEFAULT_SCHEME = "classic"

ANSI_RESET = "\033[0m"
ANSI_FG = {
    "black": 30, "red": 31, "green": 32, "yellow": 33,
    "blue": 34, "magenta": 35, "cyan": 36, "white": 37,
}
ANSI_BG = {name: code + 10 for name, code in ANSI_FG.items()}


def classify(score: float, ranges: Sequence[float]) -> int:
    """Return the color band 0-4 of a score; lower bounds are inclusive."""
    band = 0
    for threshold in ranges:
        if score >= threshold:
            band += 1
        else:
            break
    return band


def check_ranges(ranges: Sequence[float]) -> tuple[float, float, float, float]:
    values = tuple(float(v) for v in ranges)
    if len(values) != 4:
        raise ConfigurationError(
            f"4 color range values are required, got {len(values)}"
        )
    if not all(math.isfinite(v) for v in values):
        raise ConfigurationError(f"color ranges must be finite numbers, got {list(values)}")
    if any(lo > hi for lo, hi in zip(values, values[1:])):
        raise ConfigurationError(f"color ranges must be ascending, got {list(values)}")
    return values


def paginate(seq_size: int, window_length: int) -> list[tuple[int, int]]:
    """Split positions into [start, stop) windows of window_length columns."""
    return [
        (start, min(start + window_length, seq_size))
        for start in range(0, seq_size, window_length)
    ]


def page_ruler(start: int, stop: int, label_width: int) -> PageLine:
    """Ruler marking every 10th alignment position, ending with the last one."""
    cells = [
        Cell(char="|" if (pos + 1) % 10 == 0 else "-")
        for pos in range(start, stop)
    ]
    return PageLine(kind="ruler", prefix=" " * label_width, cells=cells, suffix=str(stop))


def format_label(seq_index: int, label: str, width: int) -> str:
    """Return "index. label" cut or padded to exactly width characters."""
    return f"{seq_index}. {label}"[:width].ljust(width)


def render(
    alignment: Alignment,
    groups: list[list[int]],
    matrix: ScoreMatrix,
    ranges: Sequence[float],
    window_length: int = 80,
    label_width: int = 20,
) -> list[Page]:
    """
    Render the scored alignment as pages of window_length columns.

    Each page lists the groups in partition order, each as a ruler line
    followed by one line per member sequence.
    """
    pages = []
    for number, (start, stop) in enumerate(paginate(alignment.seq_size, window_length), 1):
        lines = []
        for group in groups:
            lines.append(page_ruler(start, stop, label_width))
            for seq_index in group:
                scores = matrix[seq_index]
                cells = []
                for pos in range(start, stop):
                    score = scores[pos]
                    band = None if score is None else classify(score, ranges)
                    cells.append(Cell(char=alignment.base(seq_index, pos), band=band))
                lines.append(PageLine(
                    kind="sequence",
                    prefix=format_label(seq_index, alignment.label(seq_index), label_width),
                    cells=cells,
                    seq_index=seq_index,
                ))
        pages.append(Page(number=number, start=start, stop=stop, lines=lines))
    return pages


def legend(ranges: Sequence[float]) -> list[tuple[str, int]]:
    """Band captions for the five score ranges."""
    t1, t2, t3, t4 = ranges
    return [
        (f"| < {t1} ", 0),
        (f"| .. {t2} ", 1),
        (f"| .. {t3} ", 2),
        (f"| .. {t4} ", 3),
        (f"| > {t4} |", 4),
    ]


# --- Color schemes ---

def list_color_schemes() -> list[str]:
    return sorted(f.stem for f in COLOR_SCHEMES_DIR.glob("*.json"))


def load_color_scheme(name: str = DEFAULT_SCHEME) -> ColorScheme:
    """Load a color scheme by name."""
    path = COLOR_SCHEMES_DIR / f"{name}.json"
    if not path.exists():
        raise ConfigurationError(f"color scheme not found: {name}")
    with open(path) as f:
        return ColorScheme(**json.load(f))


def _paint(text: str, style: Optional[dict[str, str]]) -> str:
    if not style:
        return text
    codes = []
    if style.get("fg"):
        codes.append(str(ANSI_FG[style["fg"]]))
    if style.get("bg"):
        codes.append(str(ANSI_BG[style["bg"]]))
    if not codes:
        return text
    return f"\033[{';'.join(codes)}m{text}{ANSI_RESET}"


def to_ansi(pages: list[Page], ranges: Sequence[float], scheme: Optional[ColorScheme] = None) -> str:
    """
    Format pages as terminal text.

    Without a scheme the output is plain text with the same layout.
    """
    colors = scheme.colors if scheme else {}
    out = ["".join(_paint(text, colors.get(str(band))) for text, band in legend(ranges))]
    for page in pages:
        out.append(f"Page #{page.number}")
        for line in page.lines:
            if line.kind == "ruler":
                out.append(_paint(line.text, colors.get("ruler")))
                continue
            body = "".join(
                _paint(cell.char, colors.get(str(cell.band))) if cell.band is not None else cell.char
                for cell in line.cells
            )
            out.append(_paint(line.prefix, colors.get("label")) + body)
        out.append("")
    return "\n".join(out)
