import logging
from pathlib import Path
from typing import List, Optional

from reportlab.pdfgen.canvas import Canvas

from errors import ExportError
from layout import Page, PageGeometry, layout_recipe
from recipe_format import Recipe, recipe_file_stem


logger = logging.getLogger(__name__)

FONT_NAME = "Helvetica"


def render_pages(pages: List[Page], path: Path, geometry: PageGeometry, title: str = "") -> None:
    c = Canvas(str(path), pagesize=(geometry.width, geometry.height))
    if title:
        c.setTitle(title)
    for idx, page in enumerate(pages):
        if idx:
            c.showPage()
        for line in page.lines:
            c.setFont(FONT_NAME, line.font_size)
            c.drawString(line.x_offset, line.y_offset, line.text)
    c.save()


def pdf_path_for(recipe: Recipe, out_dir: Path) -> Path:
    stem = recipe_file_stem(recipe.title)
    if not stem:
        raise ExportError("Cannot export a recipe without a title")
    return Path(out_dir) / f"{stem}.pdf"


def export_recipe_pdf(
    recipe: Recipe,
    out_dir: Path,
    geometry: Optional[PageGeometry] = None,
    number_instructions: bool = False,
) -> Path:
    geometry = geometry or PageGeometry.letter()
    path = pdf_path_for(recipe, out_dir)
    pages = layout_recipe(recipe, geometry, number_instructions=number_instructions)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        render_pages(pages, path, geometry, recipe.title)
    except OSError as exc:
        raise ExportError(f"Cannot write {path}: {exc.strerror or exc}") from exc
    logger.info("PDF saved to %s (%d page(s))", path, len(pages))
    return path
