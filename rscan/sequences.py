"""Alignment loading and base lookup."""
import logging
from io import StringIO
from pathlib import Path
from typing import Optional, Union

from Bio import SeqIO

from rscan.errors import AlignmentError
from rscan.schemas import SequenceEntry

logger = logging.getLogger(__name__)


class Alignment:
    """
    An immutable set of equal-length aligned sequences.

    Bases are stored uppercase; labels are the FASTA description lines.
    """

    def __init__(self, records: list[tuple[str, str]], ids: Optional[list[str]] = None):
        if not records:
            raise AlignmentError("alignment contains no sequences")
        self._labels = tuple(label for label, _ in records)
        self._seqs = tuple(bases.upper() for _, bases in records)
        self._ids = tuple(ids) if ids else self._labels

        lengths = {len(s) for s in self._seqs}
        if len(lengths) != 1:
            raise AlignmentError(
                f"sequences are not aligned, found lengths {sorted(lengths)}"
            )

    @property
    def num_seqs(self) -> int:
        return len(self._seqs)

    @property
    def seq_size(self) -> int:
        return len(self._seqs[0])

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def __len__(self) -> int:
        return self.num_seqs

    def base(self, seq_index: int, position: int) -> str:
        """Return the uppercase base of a sequence at a position."""
        return self._seqs[seq_index][position]

    def label(self, seq_index: int) -> str:
        return self._labels[seq_index]

    def sequence(self, seq_index: int) -> str:
        return self._seqs[seq_index]

    def entries(self) -> list[SequenceEntry]:
        return [
            SequenceEntry(index=i, id=self._ids[i], label=label, length=self.seq_size)
            for i, label in enumerate(self._labels)
        ]


def parse_fasta(content: str) -> Alignment:
    """Parse FASTA format text into an Alignment."""
    records = []
    ids = []

    try:
        for record in SeqIO.parse(StringIO(content), "fasta"):
            records.append((record.description, str(record.seq)))
            ids.append(record.id)
    except ValueError as e:
        raise AlignmentError(f"invalid FASTA: {e}") from e

    if not records:
        raise AlignmentError("no valid sequences found")

    alignment = Alignment(records, ids)
    kind = detect_sequence_type(alignment.sequence(0))
    if kind != "dna":
        logger.warning("First sequence does not look like DNA (detected %s)", kind)
    logger.info(
        "Loaded %d sequences of %d positions", alignment.num_seqs, alignment.seq_size
    )
    return alignment


def load_fasta(path: Union[str, Path]) -> Alignment:
    """Read an aligned FASTA file."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise AlignmentError(f"cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise AlignmentError(f"{path} is not a text FASTA file: {e}") from e
    return parse_fasta(content)


def detect_sequence_type(sequence: str) -> str:
    """Detect if sequence is DNA/RNA or protein."""
    upper = sequence.upper().replace("-", "")
    if not upper:
        return "dna"
    dna_chars = set("ATGCUN")
    dna_count = sum(1 for c in upper if c in dna_chars)
    return "dna" if dna_count / len(upper) > 0.9 else "protein"
