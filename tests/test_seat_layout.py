import pytest

from src.buses.layout import layout_seat_numbers, validate_seat_layout

ARRANGEMENT = [
    ["01A", "01B", "", "01C"],
    ["02A", "02B", "", "02C"],
]


def test_layout_seat_numbers_skips_aisles():
    assert layout_seat_numbers(ARRANGEMENT) == ["01A", "01B", "01C", "02A", "02B", "02C"]


def test_valid_layout_returns_seat_numbers():
    assert validate_seat_layout(2, 4, ARRANGEMENT, 6) == ["01A", "01B", "01C", "02A", "02B", "02C"]


@pytest.mark.parametrize("rows,columns", [(0, 4), (2, 0), (-1, 4), (True, 4)])
def test_rejects_non_positive_dimensions(rows, columns):
    with pytest.raises(ValueError, match="Invalid rows or columns"):
        validate_seat_layout(rows, columns, ARRANGEMENT, 6)


def test_rejects_grid_of_wrong_shape():
    with pytest.raises(ValueError, match="Invalid seat layout arrangement"):
        validate_seat_layout(3, 4, ARRANGEMENT, 6)

    ragged = [["01A", "01B", "", "01C"], ["02A", "02B"]]
    with pytest.raises(ValueError, match="Invalid seat layout arrangement"):
        validate_seat_layout(2, 4, ragged, 4)


def test_rejects_seat_count_mismatch():
    with pytest.raises(ValueError, match=r"Seat count \(6\) does not match bus type \(8\)"):
        validate_seat_layout(2, 4, ARRANGEMENT, 8)


def test_rejects_duplicate_seat_numbers():
    duplicated = [["01A", "01B", "", "01C"], ["01A", "02B", "", "02C"]]
    with pytest.raises(ValueError, match="Duplicate seat numbers"):
        validate_seat_layout(2, 4, duplicated, 6)
