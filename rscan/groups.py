"""Group partitions of alignment sequences."""
import re
from typing import Iterable, Sequence

from rscan.errors import ConfigurationError

_RANGE = re.compile(r"^(\d+)(?:\.\.|-)(\d+)$")


def normalize(raw_groups: Sequence[Iterable[int]], num_seqs: int) -> list[list[int]]:
    """
    Turn group entries (lists, sets or ranges) into lists of indices.

    With no entries every sequence becomes its own group. Indices are not
    checked here; see validate_groups.
    """
    if not raw_groups:
        return [[i] for i in range(num_seqs)]
    return [list(group) for group in raw_groups]


def parse_group_spec(text: str) -> list[list[int]]:
    """
    Parse a textual group definition.

    Groups are separated by whitespace; each is a comma list of indices
    and inclusive ranges, e.g. "0..4 5,6,7 8-14 15".
    """
    groups = []
    for token in text.split():
        group = []
        for part in token.split(","):
            if not part:
                continue
            match = _RANGE.match(part)
            if match:
                start, stop = int(match.group(1)), int(match.group(2))
                if stop < start:
                    raise ConfigurationError(f"descending range {part!r}")
                group.extend(range(start, stop + 1))
            elif part.isdigit():
                group.append(int(part))
            else:
                raise ConfigurationError(f"invalid group entry {part!r}")
        groups.append(group)
    return groups


def validate_groups(groups: list[list[int]], num_seqs: int) -> None:
    """Reject empty groups and indices outside the alignment."""
    for n, group in enumerate(groups):
        if not group:
            raise ConfigurationError(f"group {n} is empty")
        for index in group:
            if not 0 <= index < num_seqs:
                raise ConfigurationError(
                    f"group {n}: sequence index {index} out of range 0..{num_seqs - 1}"
                )


def describe_groups(groups: list[list[int]], labels: Sequence[str]) -> list[str]:
    lines = []
    for n, group in enumerate(groups):
        lines.append(f"Group {n}: {group}")
        for index in group:
            lines.append(f"\t{index}. {labels[index]}")
    return lines
