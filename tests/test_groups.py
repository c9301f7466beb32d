import pytest

from rscan.errors import ConfigurationError
from rscan.groups import describe_groups, normalize, parse_group_spec, validate_groups


def test_empty_partition_gives_singletons():
    assert normalize([], 3) == [[0], [1], [2]]


def test_ranges_and_lists_keep_order():
    assert normalize([range(0, 3), [5, 4], {6}], 7) == [[0, 1, 2], [5, 4], [6]]


def test_normalize_does_not_check_bounds_or_duplicates():
    assert normalize([[0, 0, 99]], 2) == [[0, 0, 99]]


def test_parse_group_spec():
    assert parse_group_spec("0..2 5,6,7 8-9 10") == [[0, 1, 2], [5, 6, 7], [8, 9], [10]]
    assert parse_group_spec("0..1,4") == [[0, 1, 4]]
    assert parse_group_spec("") == []


@pytest.mark.parametrize("text", ["a..b", "3..1", "-1", "1;2"])
def test_parse_group_spec_rejects(text):
    with pytest.raises(ConfigurationError):
        parse_group_spec(text)


def test_validate_groups():
    validate_groups([[0, 1], [1, 2]], 3)  # overlap is allowed
    with pytest.raises(ConfigurationError, match="out of range"):
        validate_groups([[0, 3]], 3)
    with pytest.raises(ConfigurationError, match="empty"):
        validate_groups([[0], []], 3)


def test_describe_groups():
    lines = describe_groups([[0, 2]], ["x", "y", "z"])
    assert lines == ["Group 0: [0, 2]", "\t0. x", "\t2. z"]
