import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from errors import ConfigError


RECORD_EXTENSION = ".rec"
SHOPPING_LIST_FILENAME = "ingredients.sup"
SCHEDULE_REPORT_FILENAME = "schedule.txt"

RECIPE_DIRECTORIES: Tuple[str, ...] = ("desert", "dinner", "sides")
DINNER_DIRECTORY = "dinner"
GENERATED_DIRECTORY = "generated"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def app_dir() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent


@dataclass(frozen=True)
class AppConfig:
    recipes_root: Path
    schedule_dir: Path
    pdf_dir: Path
    recipe_dirs: Tuple[str, ...] = RECIPE_DIRECTORIES
    dinner_dir: str = DINNER_DIRECTORY
    generated_dir: str = GENERATED_DIRECTORY
    log_level: int = logging.INFO


def parse_log_level(raw: str) -> int:
    name = (raw or "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {raw!r}")
    return level


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Build the application configuration.

    Values come from the process environment after an optional ``.env`` file
    has been loaded. Relative paths are resolved against ``RECIPEBOT_HOME``
    (default: the application directory).
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    home = Path(os.getenv("RECIPEBOT_HOME") or app_dir())

    def _path(var: str, default: Path) -> Path:
        raw = os.getenv(var)
        if not raw:
            return default
        p = Path(raw).expanduser()
        return p if p.is_absolute() else home / p

    return AppConfig(
        recipes_root=_path("RECIPEBOT_RECIPES", home / "recipes"),
        schedule_dir=_path("RECIPEBOT_SCHEDULE", home / "schedule"),
        pdf_dir=_path("RECIPEBOT_PDF_DIR", Path.cwd()),
        log_level=parse_log_level(os.getenv("RECIPEBOT_LOG_LEVEL", "")),
    )
