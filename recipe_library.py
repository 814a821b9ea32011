import errno
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from thefuzz import fuzz

from config import RECORD_EXTENSION, RECIPE_DIRECTORIES
from errors import RecipeNotFoundError
from recipe_format import Recipe, read_recipe, recipe_file_stem, write_recipe


logger = logging.getLogger(__name__)

MIN_FUZZY_QUERY = 3


class RecipeLibrary:
    """Recipe records stored as ``<root>/<directory>/<identifier>.rec`` files."""

    def __init__(self, root: Path, directories: Sequence[str] = RECIPE_DIRECTORIES):
        self.root = Path(root)
        self.directories = tuple(directories)

    def list_names(self, directories: Optional[Sequence[str]] = None) -> List[str]:
        names: List[str] = []
        for d in directories or self.directories:
            folder = self.root / d
            if not folder.is_dir():
                logger.debug("Skipping missing recipe directory %s", folder)
                continue
            for path in folder.iterdir():
                if path.is_file() and path.suffix == RECORD_EXTENSION:
                    names.append(path.stem)
        names.sort()
        return names

    def _find(self, identifier: str) -> Optional[Path]:
        for d in self.directories:
            path = self.root / d / f"{identifier}{RECORD_EXTENSION}"
            if path.is_file():
                return path
        return None

    def path_for(self, identifier: str) -> Path:
        path = self._find(identifier)
        if path is None:
            raise RecipeNotFoundError(identifier)
        return path

    def subset(self, directories: Sequence[str]) -> "RecipeLibrary":
        return RecipeLibrary(self.root, directories)

    def read_bytes(self, identifier: str) -> bytes:
        path = self._find(identifier)
        if path is None:
            tried = [self.root / d / f"{identifier}{RECORD_EXTENSION}" for d in self.directories]
            raise FileNotFoundError(
                errno.ENOENT,
                f"No recipe record named {identifier!r} (looked in {', '.join(str(p) for p in tried)})",
                str(tried[0]) if tried else str(self.root),
            )
        return path.read_bytes()

    def load(self, identifier: str, strict: bool = False) -> Recipe:
        return read_recipe(self.path_for(identifier), strict=strict)

    def save(self, recipe: Recipe, directory: str) -> Path:
        stem = recipe_file_stem(recipe.title)
        if not stem:
            raise ValueError("A recipe needs a title before it can be saved")
        folder = self.root / directory
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / f"{stem}{RECORD_EXTENSION}"
        write_recipe(path, recipe)
        logger.info("Saved recipe %r to %s", recipe.title, path)
        return path

    def search(self, query: str, names: Optional[List[str]] = None, threshold: int = 70) -> List[str]:
        if names is None:
            names = self.list_names()
        ql = query.strip().lower()
        if not ql:
            return list(names)

        scored: List[Tuple[str, int]] = []
        for name in names:
            nl = name.lower().replace("_", " ")
            if ql in nl or ql in name.lower():
                scored.append((name, 100))
                continue
            if len(ql) < MIN_FUZZY_QUERY:
                continue
            score = fuzz.partial_ratio(ql, nl)
            if score >= threshold:
                scored.append((name, score))

        scored.sort(key=lambda x: (-x[1], x[0].lower()))
        return [name for name, _ in scored]
