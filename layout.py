import logging
from dataclasses import dataclass, field
from typing import List, Optional

from errors import ConfigError
from recipe_format import Recipe


logger = logging.getLogger(__name__)

TITLE_SIZE = 20.0
META_SIZE = 14.0
HEADING_SIZE = 16.0
BODY_SIZE = 12.0

# Average Helvetica glyph is roughly half an em wide.
CHAR_WIDTH_FACTOR = 0.5

BULLET = "•"


@dataclass(frozen=True)
class Line:
    text: str
    font_size: float
    x_offset: float
    y_offset: float


@dataclass
class Page:
    lines: List[Line] = field(default_factory=list)


@dataclass(frozen=True)
class PageGeometry:
    width: float = 612.0
    height: float = 792.0
    margin: float = 72.0
    starting_y: float = 720.0
    line_gap: float = 2.0
    section_gap: float = 10.0
    indent: float = 12.0

    @classmethod
    def letter(cls) -> "PageGeometry":
        return cls()

    @property
    def text_width(self) -> float:
        return self.width - 2 * self.margin

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"Page size must be positive, got {self.width} x {self.height}")
        if self.margin < 0:
            raise ConfigError(f"Margin must not be negative, got {self.margin}")
        if 2 * self.margin >= self.width or 2 * self.margin >= self.height:
            raise ConfigError(
                f"Margin {self.margin} leaves no room on a {self.width} x {self.height} page"
            )
        if not self.margin <= self.starting_y <= self.height:
            raise ConfigError(
                f"Starting y {self.starting_y} must lie between the bottom margin {self.margin} "
                f"and the page height {self.height}"
            )
        if self.line_gap < 0 or self.section_gap < 0:
            raise ConfigError("Line and section gaps must not be negative")
        if not 0 <= self.indent < self.text_width:
            raise ConfigError(f"Indent {self.indent} must be smaller than the text width {self.text_width}")


def estimate_width(text: str, font_size: float) -> float:
    return len(text) * font_size * CHAR_WIDTH_FACTOR


def wrap_text(text: str, font_size: float, max_width: float) -> List[str]:
    wrapped: List[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
            continue
        test = current + " " + word
        if estimate_width(test, font_size) <= max_width:
            current = test
        else:
            wrapped.append(current)
            current = word
    if current:
        wrapped.append(current)
    return wrapped


class _PageWriter:
    def __init__(self, geometry: PageGeometry):
        self.geometry = geometry
        self.pages: List[Page] = [Page()]
        self.y = geometry.starting_y

    def emit(self, text: str, size: float, x: float) -> None:
        if self.y < self.geometry.margin:
            self.pages.append(Page())
            self.y = self.geometry.starting_y
        self.pages[-1].lines.append(Line(text, size, x, self.y))
        self.y -= size + self.geometry.line_gap

    def add_text(self, text: str, size: float, x: float) -> None:
        max_width = self.geometry.text_width - (x - self.geometry.margin)
        for line in wrap_text(text, size, max_width):
            self.emit(line, size, x)

    def gap(self) -> None:
        self.y -= self.geometry.section_gap


def layout_recipe(
    recipe: Recipe,
    geometry: Optional[PageGeometry] = None,
    number_instructions: bool = False,
) -> List[Page]:
    """Lay a recipe out as pages of positioned text lines.

    The cursor starts at ``starting_y`` and moves down by font size plus
    ``line_gap`` per line. A line whose baseline would fall below the bottom
    margin goes to a fresh page instead. The result depends only on the
    recipe and the geometry.
    """
    geometry = geometry or PageGeometry.letter()
    geometry.validate()

    writer = _PageWriter(geometry)
    left = geometry.margin
    inner = geometry.margin + geometry.indent

    writer.add_text(recipe.title, TITLE_SIZE, left)
    writer.add_text(f"From: {recipe.source}", META_SIZE, left)
    writer.add_text(f"Servings: {recipe.servings}", META_SIZE, left)
    writer.add_text(f"Prep Time: {recipe.prep_time}", META_SIZE, left)
    writer.add_text(f"Cook Time: {recipe.cook_time}", META_SIZE, left)
    writer.add_text(f"Total Time: {recipe.total_time}", META_SIZE, left)

    writer.gap()
    writer.add_text("Ingredients:", HEADING_SIZE, left)
    for ingredient in recipe.ingredients:
        writer.add_text(f"{BULLET} {ingredient}", BODY_SIZE, inner)

    writer.gap()
    writer.add_text("Instructions:", HEADING_SIZE, left)
    for idx, instruction in enumerate(recipe.instructions, start=1):
        text = f"{idx}. {instruction}" if number_instructions else instruction
        writer.add_text(text, BODY_SIZE, inner)

    if recipe.notes:
        writer.gap()
        writer.add_text("Notes:", HEADING_SIZE, left)
        for note in recipe.notes:
            writer.add_text(note, BODY_SIZE, inner)

    logger.debug("Laid out %r on %d page(s)", recipe.title, len(writer.pages))
    return writer.pages
