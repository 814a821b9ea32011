import errno
import random
from pathlib import Path

import pytest

from errors import EmptyPoolError, MalformedRecordError, ScheduleIOError
from recipe_format import Recipe, encode_recipe
from recipe_library import RecipeLibrary
from schedule import (
    DAYS,
    Schedule,
    ScheduleReport,
    ShoppingList,
    materialize,
    randomize,
    read_schedule_report,
    read_shopping_list,
)


@pytest.fixture
def library(tmp_path):
    dinner = tmp_path / "recipes" / "dinner"
    dinner.mkdir(parents=True)
    (dinner / "Pasta.rec").write_bytes(encode_recipe(Recipe(title="Pasta", ingredients=["Pasta", "Salt"])))
    (dinner / "Soup.rec").write_bytes(encode_recipe(Recipe(title="Soup", ingredients=["Broth"])))
    (dinner / "Tacos.rec").write_bytes(encode_recipe(Recipe(ingredients=["Tortillas", "Salt"])))
    return RecipeLibrary(tmp_path / "recipes", ["dinner"])


def test_materialize_builds_shopping_list_and_report(library, tmp_path):
    out_dir = tmp_path / "schedule"
    schedule = Schedule({"Monday": "Pasta", "Sunday": "Soup"})

    shopping, report = materialize(schedule, library.read_bytes, out_dir)

    assert shopping.items == ["Pasta", "Salt", "Broth"]
    assert report.render() == "Monday: Pasta\nSunday: Soup\n"
    assert (out_dir / "ingredients.sup").read_text(encoding="utf-8") == "Pasta\nSalt\nBroth\n"
    assert (out_dir / "schedule.txt").read_text(encoding="utf-8") == "Monday: Pasta\nSunday: Soup\n"
    assert (out_dir / "Monday.rec").read_bytes() == library.read_bytes("Pasta")
    assert (out_dir / "Sunday.rec").read_bytes() == library.read_bytes("Soup")
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "Monday.rec", "Sunday.rec", "ingredients.sup", "schedule.txt",
    ]


def test_materialize_keeps_duplicates_and_repeats(library, tmp_path):
    schedule = Schedule.from_list(["Pasta", "Tacos", "Pasta", "", "", "", ""])

    shopping, report = materialize(schedule, library.read_bytes, tmp_path / "schedule")

    assert shopping.items == ["Pasta", "Salt", "Tortillas", "Salt", "Pasta", "Salt"]
    # Tacos has no title, so the report falls back to the identifier.
    assert report.entries == [("Monday", "Pasta"), ("Tuesday", "Tacos"), ("Wednesday", "Pasta")]


def test_empty_schedule_yields_empty_artifacts(library, tmp_path):
    out_dir = tmp_path / "schedule"

    shopping, report = materialize(Schedule(), library.read_bytes, out_dir)

    assert shopping.items == []
    assert report.entries == []
    assert (out_dir / "ingredients.sup").read_text(encoding="utf-8") == ""
    assert (out_dir / "schedule.txt").read_text(encoding="utf-8") == ""


def test_missing_recipe_aborts_without_touching_previous_week(library, tmp_path):
    out_dir = tmp_path / "schedule"
    materialize(Schedule({"Monday": "Pasta"}), library.read_bytes, out_dir)
    before = {p.name: p.read_bytes() for p in out_dir.iterdir()}

    schedule = Schedule({"Monday": "Soup", "Tuesday": "Lasagna"})
    with pytest.raises(ScheduleIOError) as excinfo:
        materialize(schedule, library.read_bytes, out_dir)

    assert excinfo.value.day == "Tuesday"
    assert excinfo.value.identifier == "Lasagna"
    assert excinfo.value.path == tmp_path / "recipes" / "dinner" / "Lasagna.rec"
    assert "Lasagna" in str(excinfo.value)
    assert {p.name: p.read_bytes() for p in out_dir.iterdir()} == before


def test_unscheduled_days_lose_their_old_copy(library, tmp_path):
    out_dir = tmp_path / "schedule"
    materialize(Schedule({"Monday": "Pasta", "Friday": "Soup"}), library.read_bytes, out_dir)

    materialize(Schedule({"Friday": "Pasta"}), library.read_bytes, out_dir)

    assert not (out_dir / "Monday.rec").exists()
    assert (out_dir / "Friday.rec").read_bytes() == library.read_bytes("Pasta")


def test_unwritable_destination_aborts_without_touching_previous_week(library, tmp_path, monkeypatch):
    out_dir = tmp_path / "schedule"
    materialize(Schedule({"Monday": "Pasta"}), library.read_bytes, out_dir)
    before = {p.name: p.read_bytes() for p in out_dir.iterdir()}

    def refuse(self, data):
        raise PermissionError(errno.EACCES, "Permission denied", str(self))

    monkeypatch.setattr(Path, "write_bytes", refuse)
    with pytest.raises(ScheduleIOError) as excinfo:
        materialize(Schedule({"Monday": "Soup", "Friday": "Tacos"}), library.read_bytes, out_dir)
    monkeypatch.undo()

    assert excinfo.value.day == "Monday"
    assert excinfo.value.identifier == "Soup"
    assert {p.name: p.read_bytes() for p in out_dir.iterdir()} == before
    assert not [p for p in tmp_path.iterdir() if "staging" in p.name]


def test_undecodable_record_aborts_without_touching_previous_week(library, tmp_path):
    out_dir = tmp_path / "schedule"
    materialize(Schedule({"Monday": "Pasta"}), library.read_bytes, out_dir)
    before = {p.name: p.read_bytes() for p in out_dir.iterdir()}
    (library.root / "dinner" / "Broken.rec").write_bytes(b"Title\t\xff\xfe\n")

    with pytest.raises(MalformedRecordError):
        materialize(Schedule({"Monday": "Soup", "Tuesday": "Broken"}), library.read_bytes, out_dir)

    assert {p.name: p.read_bytes() for p in out_dir.iterdir()} == before


def test_weekly_resolver_only_reads_dinner_records(tmp_path):
    root = tmp_path / "recipes"
    for folder, ingredients in {"desert": ["Apples"], "dinner": ["Lamb"]}.items():
        (root / folder).mkdir(parents=True)
        (root / folder / "Pie.rec").write_bytes(encode_recipe(Recipe(title="Pie", ingredients=ingredients)))
    dinners = RecipeLibrary(root).subset(["dinner"])

    shopping, _ = materialize(Schedule({"Monday": "Pie"}), dinners.read_bytes, tmp_path / "schedule")

    assert shopping.items == ["Lamb"]
    assert (tmp_path / "schedule" / "Monday.rec").read_bytes() == (root / "dinner" / "Pie.rec").read_bytes()


def test_staging_happens_beside_the_schedule_directory(library, tmp_path):
    out_dir = tmp_path / "schedule"
    seen = {}

    def resolver(identifier):
        seen["inside"] = [p.name for p in out_dir.iterdir()]
        seen["beside"] = [p.name for p in tmp_path.iterdir() if p.name.startswith(".schedule-staging-")]
        return library.read_bytes(identifier)

    materialize(Schedule({"Monday": "Pasta"}), resolver, out_dir)

    assert seen["inside"] == []
    assert len(seen["beside"]) == 1
    assert not [p for p in tmp_path.iterdir() if p.name.startswith(".schedule-staging-")]


def test_artifacts_read_back(library, tmp_path):
    out_dir = tmp_path / "schedule"
    shopping, report = materialize(Schedule({"Monday": "Pasta", "Sunday": "Soup"}), library.read_bytes, out_dir)

    assert read_shopping_list(out_dir / "ingredients.sup") == shopping
    assert read_schedule_report(out_dir / "schedule.txt") == report


def test_reading_absent_artifacts_gives_empty_values(tmp_path):
    assert read_shopping_list(tmp_path / "ingredients.sup") == ShoppingList()
    assert read_schedule_report(tmp_path / "schedule.txt") == ScheduleReport()


def test_schedule_has_seven_ordered_slots():
    schedule = Schedule()
    schedule.assign("Wednesday", "Soup")

    assert schedule.as_list() == ["", "", "Soup", "", "", "", ""]
    assert schedule.assigned() == [("Wednesday", "Soup")]

    schedule.clear("Wednesday")
    assert schedule.assigned() == []


def test_schedule_rejects_unknown_days():
    with pytest.raises(ValueError):
        Schedule().assign("Funday", "Soup")
    with pytest.raises(ValueError):
        Schedule({"Caturday": "Soup"})
    with pytest.raises(ValueError):
        Schedule.from_list(["Soup"])


def test_randomize_is_deterministic_for_a_seed():
    pool = ["Pasta", "Soup", "Tacos", "Curry"]
    first, second = Schedule(), Schedule()

    randomize(pool, first, random.Random(42))
    randomize(pool, second, random.Random(42))

    assert first == second
    assert all(identifier in pool for identifier in first.as_list())


def test_randomize_single_day_leaves_others_alone():
    schedule = Schedule({"Monday": "Pasta"})

    randomize(["Soup"], schedule, random.Random(1), day="Thursday")

    assert schedule.as_list() == ["Pasta", "", "", "Soup", "", "", ""]


def test_randomize_allows_repeats():
    schedule = Schedule()

    randomize(["Soup"], schedule, random.Random(3))

    assert schedule.as_list() == ["Soup"] * len(DAYS)


def test_randomize_with_empty_pool():
    schedule = Schedule({"Monday": "Pasta"})

    randomize([], schedule, random.Random(0))
    assert schedule.as_list() == [""] * len(DAYS)

    with pytest.raises(EmptyPoolError):
        randomize([], schedule, random.Random(0), allow_empty=False)
