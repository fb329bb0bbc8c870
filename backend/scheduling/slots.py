"""
Slot generation.

Expands a counselor's weekly availability rules into dated time slots. Each
active rule matching a date's weekday yields one slot spanning the rule's
[start_time, end_time). Generation only inserts missing slots, so running it
again for the same counselor and date never duplicates or modifies anything.
"""

import logging
from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Callable, Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.errors import InvalidAvailabilityRulesError
from backend.models.availability import AvailabilityRule
from backend.models.time_slot import SLOT_AVAILABLE, TimeSlot

logger = logging.getLogger(__name__)

DAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


@dataclass(frozen=True)
class RuleInput:
    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool = True


def day_of_week(target_date: date) -> int:
    """Weekday index with Sunday as 0, the numbering stored on availability rules."""
    return (target_date.weekday() + 1) % 7


def validate_rules(rules: Iterable[RuleInput]) -> list[RuleInput]:
    rules = list(rules)

    for rule in rules:
        if not 0 <= rule.day_of_week <= 6:
            raise InvalidAvailabilityRulesError('day_of_week must be between 0 (Sunday) and 6 (Saturday).')
        # Slot times are stored as naive local wall-clock times.
        if rule.start_time.tzinfo is not None or rule.end_time.tzinfo is not None:
            raise InvalidAvailabilityRulesError('Rule times must not include a UTC offset.')
        if rule.start_time >= rule.end_time:
            raise InvalidAvailabilityRulesError(
                f'{DAY_NAMES[rule.day_of_week]} {rule.start_time:%H:%M}-{rule.end_time:%H:%M}: '
                'start time must be before end time.'
            )

    by_day: dict[int, list[RuleInput]] = {}
    for rule in rules:
        if rule.is_active:
            by_day.setdefault(rule.day_of_week, []).append(rule)

    for weekday, day_rules in by_day.items():
        day_rules.sort(key=lambda rule: rule.start_time)
        for previous, current in zip(day_rules, day_rules[1:]):
            if current.start_time < previous.end_time:
                raise InvalidAvailabilityRulesError(
                    f'{DAY_NAMES[weekday]} {previous.start_time:%H:%M}-{previous.end_time:%H:%M} overlaps '
                    f'{current.start_time:%H:%M}-{current.end_time:%H:%M}.'
                )

    return rules


def list_rules(db: Session, counselor_id: int) -> list[AvailabilityRule]:
    return db.query(AvailabilityRule).filter(
        AvailabilityRule.counselor_id == counselor_id,
    ).order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc()).all()


def horizon_dates(start_date: date, days: int) -> list[date]:
    return [start_date + timedelta(days=offset) for offset in range(days)]


def _add_missing_slots(db: Session, counselor_id: int, dates: Iterable[date]) -> list[TimeSlot]:
    dates = list(dates)
    if not dates:
        return []

    rules_by_day: dict[int, list[AvailabilityRule]] = {}
    active_rules = db.query(AvailabilityRule).filter(
        AvailabilityRule.counselor_id == counselor_id,
        AvailabilityRule.is_active.is_(True),
    ).all()
    for rule in active_rules:
        rules_by_day.setdefault(rule.day_of_week, []).append(rule)

    existing = {
        (slot_date, start_time, end_time)
        for slot_date, start_time, end_time in db.query(
            TimeSlot.date, TimeSlot.start_time, TimeSlot.end_time,
        ).filter(
            TimeSlot.counselor_id == counselor_id,
            TimeSlot.date >= min(dates),
            TimeSlot.date <= max(dates),
        ).all()
    }

    created: list[TimeSlot] = []
    for target_date in dates:
        for rule in rules_by_day.get(day_of_week(target_date), []):
            key = (target_date, rule.start_time, rule.end_time)
            if key in existing:
                continue

            slot = TimeSlot(
                counselor_id=counselor_id,
                date=target_date,
                start_time=rule.start_time,
                end_time=rule.end_time,
                status=SLOT_AVAILABLE,
            )
            db.add(slot)
            existing.add(key)
            created.append(slot)

    db.flush()
    return created


def _run_with_retry(db: Session, counselor_id: int, work: Callable[[], list[TimeSlot]]) -> list[TimeSlot]:
    """Run ``work`` and commit, re-running it when a concurrent generator wins the unique index.

    ``work`` must be safe to repeat after a rollback.
    """
    attempts = max(1, config.SLOT_GENERATION_RETRIES + 1)

    for attempt in range(1, attempts + 1):
        try:
            created = work()
            db.commit()
            return created
        except IntegrityError:
            # Another generator inserted one of our slots first; re-reading picks it up.
            db.rollback()
            if attempt == attempts:
                raise
            logger.info(
                'Slot generation for counselor %s collided with a concurrent run, retrying (%s/%s).',
                counselor_id,
                attempt,
                attempts - 1,
            )
        except SQLAlchemyError:
            db.rollback()
            raise


def _generate(db: Session, counselor_id: int, dates: list[date]) -> list[TimeSlot]:
    return _run_with_retry(db, counselor_id, lambda: _add_missing_slots(db, counselor_id, dates))


def generate_slots_for_date(db: Session, counselor_id: int, target_date: date) -> list[TimeSlot]:
    created = _generate(db, counselor_id, [target_date])
    logger.info('Generated %s slot(s) for counselor %s on %s.', len(created), counselor_id, target_date)
    return created


def generate_slots_for_horizon(
    db: Session,
    counselor_id: int,
    start_date: date | None = None,
    days: int | None = None,
) -> list[TimeSlot]:
    start_date = start_date or date.today()
    days = config.SLOT_HORIZON_DAYS if days is None else days
    created = _generate(db, counselor_id, horizon_dates(start_date, days))
    logger.info(
        'Generated %s slot(s) for counselor %s over %s day(s) from %s.',
        len(created),
        counselor_id,
        days,
        start_date,
    )
    return created


def replace_rules(
    db: Session,
    counselor_id: int,
    rules: Iterable[RuleInput],
    today: date | None = None,
) -> list[AvailabilityRule]:
    """Swap the counselor's rule set and extend the slot horizon in one transaction."""
    rules = validate_rules(rules)
    today = today or date.today()

    def swap_rules_and_generate() -> list[TimeSlot]:
        db.query(AvailabilityRule).filter(
            AvailabilityRule.counselor_id == counselor_id,
        ).delete(synchronize_session=False)

        db.add_all([
            AvailabilityRule(
                counselor_id=counselor_id,
                day_of_week=rule.day_of_week,
                start_time=rule.start_time,
                end_time=rule.end_time,
                is_active=rule.is_active,
            )
            for rule in rules
        ])
        db.flush()

        return _add_missing_slots(db, counselor_id, horizon_dates(today, config.SLOT_HORIZON_DAYS))

    created = _run_with_retry(db, counselor_id, swap_rules_and_generate)

    logger.info(
        'Replaced availability for counselor %s with %s rule(s); %s new slot(s).',
        counselor_id,
        len(rules),
        len(created),
    )
    return list_rules(db, counselor_id)
