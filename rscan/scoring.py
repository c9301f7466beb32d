"""Group-relative base frequencies and per-base scoring."""
import logging
from typing import Optional

from rscan.errors import FormulaError, ScanError
from rscan.formula import evaluate
from rscan.groups import normalize, validate_groups
from rscan.schemas import ScoringParameters
from rscan.sequences import Alignment

logger = logging.getLogger(__name__)

SYMBOLS = ("A", "C", "T", "G", "-")

ScoreMatrix = list[list[Optional[float]]]


def frequencies(alignment: Alignment, group: list[int], position: int) -> dict[str, float]:
    """
    Relative frequency of A, C, T, G and gap at a position within a group.

    Other symbols count toward the group size only, so the values may sum
    to less than 1. An empty group has all frequencies 0.0.
    """
    counts = dict.fromkeys(SYMBOLS, 0)
    for seq_index in group:
        base = alignment.base(seq_index, position)
        if base in counts:
            counts[base] += 1
    size = len(group)
    if size == 0:
        return dict.fromkeys(SYMBOLS, 0.0)
    return {symbol: count / size for symbol, count in counts.items()}


def scan(alignment: Alignment, groups: list[list[int]], params: ScoringParameters) -> ScoreMatrix:
    """
    Score every base of the alignment against the group partition.

    At each position every group in turn is the ingroup and the remaining
    groups together form the outgroup. Each ingroup base is scored with
    a = its ingroup frequency and b = its outgroup frequency. Sequences in
    no group keep None; a sequence listed in several groups keeps the
    score from the last one.
    """
    groups = normalize(groups, alignment.num_seqs)
    validate_groups(groups, alignment.num_seqs)
    logger.info(
        "Scanning %d positions x %d groups (ka=%s, kb=%s, formula=%r)",
        alignment.seq_size, len(groups), params.ka, params.kb, params.formula,
    )

    matrix: ScoreMatrix = [[None] * alignment.seq_size for _ in range(alignment.num_seqs)]
    bindings = {"ka": params.ka, "kb": params.kb}

    for position in range(alignment.seq_size):
        for g, ingroup in enumerate(groups):
            outgroup = [s for i, group in enumerate(groups) if i != g for s in group]
            ingroup_freq = frequencies(alignment, ingroup, position)
            outgroup_freq = frequencies(alignment, outgroup, position)

            for seq_index in ingroup:
                base = alignment.base(seq_index, position)
                bindings["a"] = ingroup_freq.get(base, 0.0)
                bindings["b"] = outgroup_freq.get(base, 0.0)
                try:
                    matrix[seq_index][position] = evaluate(params.formula, bindings)
                except FormulaError as e:
                    label = alignment.label(seq_index)
                    raise ScanError(
                        f"scan aborted at position {position + 1}, "
                        f"sequence {seq_index} ({label}): {e}",
                        position, seq_index, label,
                    ) from e

    logger.info("Scan finished")
    return matrix
