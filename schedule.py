import logging
import os
import random
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import RECORD_EXTENSION, SCHEDULE_REPORT_FILENAME, SHOPPING_LIST_FILENAME
from errors import EmptyPoolError, ScheduleIOError
from recipe_format import decode_recipe


logger = logging.getLogger(__name__)

DAYS: Tuple[str, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

Resolver = Callable[[str], bytes]


def _empty_slots() -> Dict[str, str]:
    return {day: "" for day in DAYS}


def _check_day(day: str) -> None:
    if day not in DAYS:
        raise ValueError(f"Unknown day {day!r}; expected one of {', '.join(DAYS)}")


@dataclass
class Schedule:
    slots: Dict[str, str] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        given = dict(self.slots)
        self.slots = _empty_slots()
        for day, identifier in given.items():
            self.assign(day, identifier)

    @classmethod
    def from_list(cls, identifiers: Sequence[str]) -> "Schedule":
        if len(identifiers) != len(DAYS):
            raise ValueError(f"A schedule needs {len(DAYS)} slots, got {len(identifiers)}")
        return cls(dict(zip(DAYS, identifiers)))

    def assign(self, day: str, identifier: Optional[str]) -> None:
        _check_day(day)
        self.slots[day] = (identifier or "").strip()

    def clear(self, day: str) -> None:
        self.assign(day, "")

    def get(self, day: str) -> str:
        _check_day(day)
        return self.slots[day]

    def assigned(self) -> List[Tuple[str, str]]:
        return [(day, self.slots[day]) for day in DAYS if self.slots[day]]

    def as_list(self) -> List[str]:
        return [self.slots[day] for day in DAYS]


@dataclass
class ShoppingList:
    items: List[str] = field(default_factory=list)

    def render(self) -> str:
        return "".join(f"{item}\n" for item in self.items)


@dataclass
class ScheduleReport:
    entries: List[Tuple[str, str]] = field(default_factory=list)

    def render(self) -> str:
        return "".join(f"{day}: {label}\n" for day, label in self.entries)


def randomize(
    pool: Sequence[str],
    schedule: Schedule,
    rng: Optional[random.Random] = None,
    day: Optional[str] = None,
    allow_empty: bool = True,
) -> None:
    """Fill every slot, or just ``day``, with a uniform draw from ``pool``.

    Draws are with replacement, so a recipe can land on several days. An empty
    pool leaves the slot empty unless ``allow_empty`` is False.
    """
    rng = rng or random.Random()
    candidates = list(pool)
    days = DAYS if day is None else (day,)
    for d in days:
        _check_day(d)
        if candidates:
            schedule.assign(d, rng.choice(candidates))
            continue
        if not allow_empty:
            raise EmptyPoolError(f"No recipes available to schedule for {d}")
        logger.warning("Recipe pool is empty; leaving %s unscheduled", d)
        schedule.assign(d, "")


def day_file_name(day: str) -> str:
    return f"{day}{RECORD_EXTENSION}"


def materialize(schedule: Schedule, resolver: Resolver, out_dir: Path) -> Tuple[ShoppingList, ScheduleReport]:
    """Resolve the week into per-day record copies, a shopping list and a report.

    Every artifact is written to a staging directory beside ``out_dir`` and
    only moved into ``out_dir`` once all days resolved, so a failure leaves
    the previous week untouched. Day copies for unscheduled days are removed
    on publish.
    """
    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{out_dir.name}-staging-", dir=out_dir.parent))
    except OSError as exc:
        raise ScheduleIOError(exc.strerror or str(exc), out_dir) from exc

    shopping = ShoppingList()
    report = ScheduleReport()
    try:
        for day, identifier in schedule.assigned():
            try:
                data = resolver(identifier)
            except OSError as exc:
                path = Path(exc.filename) if exc.filename else None
                raise ScheduleIOError(exc.strerror or str(exc), path, day, identifier) from exc

            target = staging / day_file_name(day)
            try:
                target.write_bytes(data)
            except OSError as exc:
                raise ScheduleIOError(exc.strerror or str(exc), out_dir / target.name, day, identifier) from exc

            recipe = decode_recipe(data)
            shopping.items.extend(recipe.ingredients)
            report.entries.append((day, recipe.title or identifier))
            logger.debug("%s: %s (%d ingredients)", day, identifier, len(recipe.ingredients))

        try:
            (staging / SHOPPING_LIST_FILENAME).write_text(shopping.render(), encoding="utf-8")
            (staging / SCHEDULE_REPORT_FILENAME).write_text(report.render(), encoding="utf-8")
            _publish(staging, out_dir)
        except OSError as exc:
            raise ScheduleIOError(exc.strerror or str(exc), out_dir) from exc
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info("Published schedule for %d days to %s", len(report.entries), out_dir)
    return shopping, report


def _publish(staging: Path, out_dir: Path) -> None:
    staged = {p.name for p in staging.iterdir()}
    for day in DAYS:
        name = day_file_name(day)
        if name not in staged:
            (out_dir / name).unlink(missing_ok=True)
    for name in sorted(staged):
        os.replace(staging / name, out_dir / name)


def read_shopping_list(path: Path) -> ShoppingList:
    path = Path(path)
    if not path.exists():
        return ShoppingList()
    lines = path.read_text(encoding="utf-8").splitlines()
    return ShoppingList([line for line in lines if line.strip()])


def read_schedule_report(path: Path) -> ScheduleReport:
    path = Path(path)
    if not path.exists():
        return ScheduleReport()
    entries: List[Tuple[str, str]] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        day, sep, label = line.partition(": ")
        if sep:
            entries.append((day, label))
    return ScheduleReport(entries)
