import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from errors import MalformedRecordError, RecordReadError


logger = logging.getLogger(__name__)


@dataclass
class Recipe:
    title: str = ""
    source: str = ""
    servings: str = ""
    prep_time: str = ""
    cook_time: str = ""
    total_time: str = ""
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


class Section(enum.Enum):
    NONE = "None"
    INGREDIENTS = "Ingredients"
    INSTRUCTIONS = "Instructions"
    NOTES = "Notes"


HEADER_FIELDS: Dict[str, str] = {
    "Title": "title",
    "From": "source",
    "Servings": "servings",
    "Prep Time": "prep_time",
    "Cook Time": "cook_time",
    "Total Time": "total_time",
}

SECTION_FIELDS: Dict[Section, str] = {
    Section.INGREDIENTS: "ingredients",
    Section.INSTRUCTIONS: "instructions",
    Section.NOTES: "notes",
}

_START_MARKERS = {f"{s.value} Start": s for s in SECTION_FIELDS}
_END_MARKERS = {f"{s.value} End": s for s in SECTION_FIELDS}


def decode_recipe(data: Union[bytes, str], strict: bool = False) -> Recipe:
    """Parse a recipe record.

    Blank lines are skipped. A line holding a tab is a ``key<TAB>value``
    header; any other line is a section marker or, while a section is open,
    a body line of that section.

    The default mode is lenient: unknown header keys and body lines outside a
    section are dropped, and a section without its ``End`` marker runs to the
    end of the input. ``strict=True`` turns each of those into a
    :class:`MalformedRecordError`.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedRecordError(f"not valid UTF-8 ({exc.reason})") from exc
    else:
        text = data

    headers: Dict[str, str] = {}
    sections: Dict[Section, List[str]] = {s: [] for s in SECTION_FIELDS}
    current = Section.NONE
    opened_at = 0

    for number, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        if "\t" in line:
            key, value = line.split("\t", 1)
            attr = HEADER_FIELDS.get(key.strip())
            if attr is not None:
                headers[attr] = value.strip()
            elif strict:
                raise MalformedRecordError(f"unknown header {key.strip()!r}", number)
            continue

        stripped = line.strip()
        if stripped in _START_MARKERS:
            if strict and current is not Section.NONE:
                raise MalformedRecordError(
                    f"{stripped!r} while section {current.value!r} is still open", number
                )
            current = _START_MARKERS[stripped]
            opened_at = number
        elif stripped in _END_MARKERS:
            if strict and _END_MARKERS[stripped] is not current:
                raise MalformedRecordError(f"{stripped!r} does not close an open section", number)
            current = Section.NONE
        elif current is not Section.NONE:
            sections[current].append(stripped)
        elif strict:
            raise MalformedRecordError("text outside of any section", number)

    if current is not Section.NONE:
        if strict:
            raise MalformedRecordError(f"section {current.value!r} is never closed", opened_at)
        logger.warning("Section %r opened on line %d is never closed", current.value, opened_at)

    recipe = Recipe(**headers)
    for section, attr in SECTION_FIELDS.items():
        setattr(recipe, attr, sections[section])
    return recipe


def encode_recipe(recipe: Recipe) -> bytes:
    lines: List[str] = []
    for key, attr in HEADER_FIELDS.items():
        lines.append(f"{key}\t{getattr(recipe, attr) or ''}")
    for section, attr in SECTION_FIELDS.items():
        lines.append(f"{section.value} Start")
        lines.extend(getattr(recipe, attr) or [])
        lines.append(f"{section.value} End")
    return ("\n".join(lines) + "\n").encode("utf-8")


def read_recipe(path: Path, strict: bool = False) -> Recipe:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise RecordReadError(Path(path), exc.strerror or str(exc)) from exc
    recipe = decode_recipe(data, strict=strict)
    logger.debug("Parsed %s: %d ingredients, %d instructions", path, len(recipe.ingredients), len(recipe.instructions))
    return recipe


def write_recipe(path: Path, recipe: Recipe) -> None:
    Path(path).write_bytes(encode_recipe(recipe))


def recipe_file_stem(title: str) -> str:
    return title.strip().replace(" ", "_")


def split_ingredient_field(text: str) -> List[str]:
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def format_recipe_text(recipe: Recipe) -> str:
    parts = [
        f"Recipe: {recipe.title}",
        "",
        f"From: {recipe.source}",
        "",
        f"Servings: {recipe.servings}",
        "",
        f"Prep Time: {recipe.prep_time}",
        f"Cook Time: {recipe.cook_time}",
        f"Total Time: {recipe.total_time}",
        "",
        "Ingredients:",
        "\n".join(recipe.ingredients),
        "",
        "Instructions:",
        "\n".join(recipe.instructions),
        "",
        "Notes:",
        "\n".join(recipe.notes),
    ]
    return "\n".join(parts)
