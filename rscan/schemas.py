"""Data models for the alignment scanner."""
import math

from pydantic import BaseModel, field_validator
from typing import Optional

from rscan.errors import FormulaError
from rscan.formula import DEFAULT_FORMULA, check_formula

DEFAULT_COLOR_RANGES = (0.5, 0.7, 0.8, 0.9)

# Preset coefficient values for the default formula
CONSENSUS_PRESETS = {"strict": 20, "high": 10, "low": 3}
ASPECIFICITY_PRESETS = {"forbid": 20, "penalty": 10, "allow": 0}


class SequenceEntry(BaseModel):
    index: int
    id: str
    label: str
    length: int


class ScoringParameters(BaseModel):
    ka: float = 20
    kb: float = 20
    formula: str = DEFAULT_FORMULA
    color_ranges: tuple[float, float, float, float] = DEFAULT_COLOR_RANGES
    window_length: int = 80
    label_width: int = 20

    @field_validator("formula")
    @classmethod
    def _formula_parses(cls, value: str) -> str:
        try:
            check_formula(value)
        except FormulaError as e:
            raise ValueError(str(e)) from e
        return value

    @field_validator("color_ranges")
    @classmethod
    def _ranges_ascending(cls, value: tuple) -> tuple:
        if not all(math.isfinite(v) for v in value):
            raise ValueError(f"color ranges must be finite, got {list(value)}")
        if any(lo > hi for lo, hi in zip(value, value[1:])):
            raise ValueError(f"color ranges must be ascending, got {list(value)}")
        return value

    @field_validator("window_length", "label_width")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


class ParamsUpdate(BaseModel):
    ka: Optional[float] = None
    kb: Optional[float] = None
    formula: Optional[str] = None


class ColorRangesUpdate(BaseModel):
    ranges: list[float]


class LayoutUpdate(BaseModel):
    window_length: Optional[int] = None
    label_width: Optional[int] = None


class GroupsUpdate(BaseModel):
    groups: list[list[int]] = []


class ColorScheme(BaseModel):
    name: str
    description: str = ""
    colors: dict[str, dict[str, str]]  # band or "ruler"/"label" -> {fg, bg}


class Cell(BaseModel):
    char: str
    band: Optional[int] = None  # None for unscored positions


class PageLine(BaseModel):
    kind: str  # ruler, sequence
    prefix: str
    cells: list[Cell]
    suffix: str = ""
    seq_index: Optional[int] = None

    @property
    def text(self) -> str:
        return self.prefix + "".join(c.char for c in self.cells) + self.suffix


class Page(BaseModel):
    number: int
    start: int
    stop: int
    lines: list[PageLine]


class ScanSummary(BaseModel):
    num_seqs: int
    seq_size: int
    groups: list[list[int]]
    params: ScoringParameters
