import pytest

from rscan.sequences import Alignment, parse_fasta

FASTA = """>s0 first sample
AACGT-ACGN
>s1 second sample
AACGT-ACGT
>s2 third
ACCGTTACGA
>s3 fourth
GCCGTTACGA
"""


@pytest.fixture
def fasta_text():
    return FASTA


@pytest.fixture
def fasta_file(tmp_path):
    f = tmp_path / "aln.fasta"
    f.write_text(FASTA)
    return f


@pytest.fixture
def alignment():
    return parse_fasta(FASTA)


@pytest.fixture
def long_alignment():
    return Alignment([(f"seq{i}", "ACGT" * 25) for i in range(3)])
