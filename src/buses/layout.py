from typing import List, Sequence

EMPTY_CELL = ""

def layout_seat_numbers(arrangement: Sequence[Sequence[str]]) -> List[str]:
    """Seat numbers of a grid in row-major order, skipping aisle/empty cells"""
    return [cell for row in arrangement for cell in row if cell != EMPTY_CELL]

def validate_seat_layout(rows: int, columns: int, arrangement: Sequence[Sequence[str]], expected_seats: int) -> List[str]:
    """
    Check a seat grid against its bus type and return the seat numbers it defines.

    Rules:
    - rows and columns are positive integers
    - arrangement has exactly `rows` rows of `columns` cells each
    - the number of non-empty cells equals the bus type's seat count
    - seat numbers are unique

    Raises ValueError with a client-facing message on the first broken rule.
    """
    if isinstance(rows, bool) or isinstance(columns, bool):
        raise ValueError("Invalid rows or columns")
    if not isinstance(rows, int) or not isinstance(columns, int) or rows <= 0 or columns <= 0:
        raise ValueError("Invalid rows or columns")

    if len(arrangement) != rows or any(len(row) != columns for row in arrangement):
        raise ValueError("Invalid seat layout arrangement")

    seat_numbers = layout_seat_numbers(arrangement)
    if len(seat_numbers) != expected_seats:
        raise ValueError(f"Seat count ({len(seat_numbers)}) does not match bus type ({expected_seats})")

    if len(set(seat_numbers)) != len(seat_numbers):
        raise ValueError("Duplicate seat numbers")

    return seat_numbers
