"""Nucleotide scoring and color masking of alignments for signature search."""

__version__ = "0.2.0"
