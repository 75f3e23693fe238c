"""
Equipment hour tracking.

Drone and generator hours are derived from attendance records and never
edited directly. After any attendance change the affected equipment is
recomputed from all of its records.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.database_models import Drone, Generator, OperationalAttendance
from app.services.dose_calculator import parse_non_negative

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def parse_clock_minutes(value: Optional[str]) -> Optional[int]:
    """'HH:MM' (or 'HH:MM:SS') to minutes after midnight; None if unparseable."""
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def flight_hours(check_in_time: Optional[str], check_out_time: Optional[str]) -> float:
    """
    Hours between check-in and check-out.

    A check-out earlier than the check-in is taken as the next day.
    Missing or invalid times contribute no hours.
    """
    start = parse_clock_minutes(check_in_time)
    end = parse_clock_minutes(check_out_time)
    if start is None or end is None:
        return 0.0
    minutes = end - start
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes / 60.0


def drone_hours_from_records(records: Iterable[OperationalAttendance]) -> float:
    return sum(flight_hours(r.check_in_time, r.check_out_time) for r in records)


def recalculate_drone_hours(db: Session, drone_id: Optional[str]) -> Optional[float]:
    if not drone_id:
        return None
    drone = db.query(Drone).filter(Drone.id == drone_id).first()
    if not drone:
        return None

    records = db.query(OperationalAttendance).filter(OperationalAttendance.drone_id == drone_id).all()
    drone.total_hours = round(drone_hours_from_records(records), 4)
    logger.debug(f"Drone {drone.model} ({drone.id}): {drone.total_hours:.2f} h over {len(records)} records")
    return drone.total_hours


def recalculate_generator_hours(db: Session, generator_id: Optional[str]) -> Optional[float]:
    if not generator_id:
        return None
    generator = db.query(Generator).filter(Generator.id == generator_id).first()
    if not generator:
        return None

    total = db.query(func.coalesce(func.sum(OperationalAttendance.gen_usage_hours), 0.0)).filter(
        OperationalAttendance.generator_id == generator_id
    ).scalar()
    generator.total_hours = round(parse_non_negative(total), 4)
    logger.debug(f"Generator {generator.brand} ({generator.id}): {generator.total_hours:.2f} h")
    return generator.total_hours


def refresh_equipment_hours(
    db: Session,
    drone_ids: Iterable[Optional[str]] = (),
    generator_ids: Iterable[Optional[str]] = ()
) -> None:
    """Recompute hours for every drone/generator touched by an attendance change."""
    for drone_id in {d for d in drone_ids if d}:
        recalculate_drone_hours(db, drone_id)
    for generator_id in {g for g in generator_ids if g}:
        recalculate_generator_hours(db, generator_id)
