import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from src.models import Trip

TIME_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"
DURATION_PATTERN = r"^[0-9]+h\s[0-5]?[0-9]m$"

def is_valid_time(value: str) -> bool:
    return bool(re.match(TIME_PATTERN, value or ""))

def is_valid_duration(value: str) -> bool:
    return bool(re.match(DURATION_PATTERN, value or ""))

def parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))

def trip_interval(trip_date: date, departure_time: str, arrival_time: str) -> Tuple[datetime, datetime]:
    """
    Half-open [start, end) window a trip occupies its bus.

    An arrival earlier than the departure means the trip runs past midnight,
    so the end moves to the following day.
    """
    start = datetime.combine(trip_date, parse_time(departure_time))
    end = datetime.combine(trip_date, parse_time(arrival_time))
    if end < start:
        end += timedelta(days=1)
    return start, end

def intervals_overlap(first: Tuple[datetime, datetime], second: Tuple[datetime, datetime]) -> bool:
    # touching boundaries (one ends when the other starts) do not overlap
    return first[0] < second[1] and first[1] > second[0]

class TripValidator:
    """Schedule checks that need the current trip catalog"""

    def __init__(self, db: Session):
        self.db = db

    def find_overlapping_trip(
        self,
        bus_id: str,
        trip_date: date,
        departure_time: str,
        arrival_time: str,
        exclude_trip_id: Optional[str] = None
    ) -> Optional[Trip]:
        """Return the first trip of the same bus and date whose window intersects the new one"""
        candidate = trip_interval(trip_date, departure_time, arrival_time)

        query = self.db.query(Trip).filter(Trip.bus_id == bus_id, Trip.date == trip_date)
        if exclude_trip_id:
            query = query.filter(Trip.id != exclude_trip_id)

        for other in query.all():
            if intervals_overlap(candidate, trip_interval(other.date, other.departure_time, other.arrival_time)):
                return other
        return None
