"""Interactive scanning session: alignment, groups, parameters and scores."""
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from rscan.errors import ConfigurationError, FormulaError, SessionError
from rscan.export import export, write_csv
from rscan.formula import display_formula
from rscan.groups import describe_groups, normalize, validate_groups
from rscan.render import check_ranges, render
from rscan.schemas import (
    ASPECIFICITY_PRESETS,
    CONSENSUS_PRESETS,
    DEFAULT_COLOR_RANGES,
    Page,
    ScanSummary,
    ScoringParameters,
)
from rscan.scoring import ScoreMatrix, scan
from rscan.sequences import Alignment, load_fasta, parse_fasta

logger = logging.getLogger(__name__)


class Session:
    """
    Holds the working alignment and everything derived from it.

    Parameters may be changed at any time; scores are only replaced by a
    scan that completes.
    """

    def __init__(self, alignment: Optional[Alignment] = None):
        self.params = ScoringParameters()
        self.alignment: Optional[Alignment] = None
        self.groups: list[list[int]] = []
        self.scores: Optional[ScoreMatrix] = None
        if alignment is not None:
            self._set_alignment(alignment)

    # --- Alignment ---

    def open(self, path: Union[str, Path]) -> Alignment:
        """Load an aligned FASTA file and reset groups to one per sequence."""
        return self._set_alignment(load_fasta(path))

    def load_text(self, content: str) -> Alignment:
        return self._set_alignment(parse_fasta(content))

    def _set_alignment(self, alignment: Alignment) -> Alignment:
        self.alignment = alignment
        self.groups = normalize([], alignment.num_seqs)
        self.scores = None
        return alignment

    def _require_alignment(self) -> Alignment:
        if self.alignment is None:
            raise SessionError("no alignment loaded")
        return self.alignment

    def labels(self) -> list[str]:
        alignment = self._require_alignment()
        return [f"{i}. {label}" for i, label in enumerate(alignment.labels)]

    # --- Groups ---

    def set_groups(self, raw_groups) -> list[list[int]]:
        alignment = self._require_alignment()
        groups = normalize(raw_groups, alignment.num_seqs)
        validate_groups(groups, alignment.num_seqs)
        self.groups = groups
        self.scores = None
        logger.debug("Groups set to %s", groups)
        return groups

    def groups_description(self) -> list[str]:
        alignment = self._require_alignment()
        return describe_groups(self.groups, alignment.labels)

    # --- Parameters ---

    def update_params(self, **changes) -> ScoringParameters:
        """Apply several parameter changes at once, or none if any is invalid."""
        try:
            params = ScoringParameters(**{**self.params.model_dump(), **changes})
        except ValidationError as e:
            errors = e.errors()
            message = "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in errors)
            if any(err["loc"][0] == "formula" for err in errors):
                raise FormulaError(message) from e
            raise ConfigurationError(message) from e
        self.params = params
        return params

    def set_ka(self, value: float) -> None:
        self.update_params(ka=value)

    def set_kb(self, value: float) -> None:
        self.update_params(kb=value)

    def consensus(self, preset: str) -> float:
        """Set ka from a preset: strict, high or low."""
        if preset not in CONSENSUS_PRESETS:
            raise ConfigurationError(
                f"unknown consensus preset {preset!r}, use one of {list(CONSENSUS_PRESETS)}"
            )
        self.set_ka(CONSENSUS_PRESETS[preset])
        return self.params.ka

    def aspecificity(self, preset: str) -> float:
        """Set kb from a preset: forbid, penalty or allow."""
        if preset not in ASPECIFICITY_PRESETS:
            raise ConfigurationError(
                f"unknown aspecificity preset {preset!r}, use one of {list(ASPECIFICITY_PRESETS)}"
            )
        self.set_kb(ASPECIFICITY_PRESETS[preset])
        return self.params.kb

    def set_formula(self, expression: str) -> None:
        self.update_params(formula=expression)

    @property
    def formula(self) -> str:
        return display_formula(self.params.formula)

    def set_color_ranges(self, ranges) -> tuple:
        return self.update_params(color_ranges=check_ranges(ranges)).color_ranges

    def reset_color_ranges(self) -> tuple:
        return self.update_params(color_ranges=DEFAULT_COLOR_RANGES).color_ranges

    def set_layout(self, window_length: Optional[int] = None, label_width: Optional[int] = None) -> None:
        changes = {}
        if window_length is not None:
            changes["window_length"] = window_length
        if label_width is not None:
            changes["label_width"] = label_width
        self.update_params(**changes)

    # --- Scores ---

    def scan(self) -> ScoreMatrix:
        """
        Rebuild the score matrix; on failure the previous one is kept.

        If the alignment or groups are replaced while scoring, the result
        is discarded and SessionError is raised.
        """
        alignment = self._require_alignment()
        groups = self.groups
        matrix = scan(alignment, groups, self.params)
        if self.alignment is not alignment or self.groups is not groups:
            raise SessionError("alignment or groups changed during the scan, scores discarded")
        self.scores = matrix
        return matrix

    def _require_scores(self) -> ScoreMatrix:
        if self.scores is None:
            raise SessionError("no scores yet, run a scan first")
        return self.scores

    def pages(self) -> list[Page]:
        scores = self._require_scores()
        return render(
            self.alignment,
            self.groups,
            scores,
            self.params.color_ranges,
            self.params.window_length,
            self.params.label_width,
        )

    def rows(self) -> list[list]:
        return export(self.alignment, self._require_scores())

    def export_csv(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        write_csv(self.rows(), path)
        logger.info("Scores written to %s", path)
        return path

    def summary(self) -> ScanSummary:
        alignment = self._require_alignment()
        return ScanSummary(
            num_seqs=alignment.num_seqs,
            seq_size=alignment.seq_size,
            groups=self.groups,
            params=self.params,
        )
