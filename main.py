import logging
import random
import sys
from typing import Dict, List

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QPushButton,
    QSplitter,
    QTabWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
    QAbstractItemView,
)

from config import (
    LOG_FORMAT,
    SCHEDULE_REPORT_FILENAME,
    SHOPPING_LIST_FILENAME,
    AppConfig,
    load_config,
)
from errors import ConfigError, RecipeBotError
from pdf_export import export_recipe_pdf
from recipe_format import Recipe, format_recipe_text, split_ingredient_field
from recipe_library import RecipeLibrary
from schedule import DAYS, Schedule, materialize, randomize, read_schedule_report, read_shopping_list


logger = logging.getLogger(__name__)


def _lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def build_recipe_from_form(
    title: str,
    source: str,
    servings: str,
    prep_time: str,
    cook_time: str,
    total_time: str,
    ingredients: str,
    instructions: str,
    notes: str,
) -> Recipe:
    return Recipe(
        title=title.strip(),
        source=source.strip(),
        servings=servings.strip(),
        prep_time=prep_time.strip(),
        cook_time=cook_time.strip(),
        total_time=total_time.strip(),
        ingredients=split_ingredient_field(ingredients),
        instructions=_lines(instructions),
        notes=_lines(notes),
    )


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig):
        super().__init__()
        self.config = config
        self.library = RecipeLibrary(config.recipes_root, config.recipe_dirs)
        self.dinner_library = self.library.subset([config.dinner_dir])
        self.schedule = Schedule()
        self.rng = random.Random()
        self.dinner_pool: List[str] = []
        self.all_names: List[str] = []

        self.setWindowTitle("Recipe Bot")
        self.resize(900, 700)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)
        self.tabs.addTab(self._build_weekly_tab(), "Weekly Recipes")
        self.tabs.addTab(self._build_new_recipe_tab(), "New Recipe")
        self.tabs.addTab(self._build_view_tab(), "View Recipe")
        self.tabs.currentChanged.connect(lambda _: self.refresh_data())

        self.refresh_data()
        self._show_current_week()

    def _build_weekly_tab(self) -> QWidget:
        tab = QWidget()
        layout = QVBoxLayout(tab)

        self.day_combos: Dict[str, QComboBox] = {}
        for day in DAYS:
            row = QHBoxLayout()
            label = QLabel(day)
            label.setFixedWidth(90)
            row.addWidget(label)

            combo = QComboBox()
            combo.currentTextChanged.connect(lambda text, d=day: self.schedule.assign(d, text))
            row.addWidget(combo, 1)
            self.day_combos[day] = combo

            btn_dice = QPushButton("\U0001F3B2")
            btn_dice.setFixedWidth(40)
            btn_dice.clicked.connect(lambda _, d=day: self.randomize_day(d))
            row.addWidget(btn_dice)
            layout.addLayout(row)

        button_row = QHBoxLayout()
        self.btn_randomize_all = QPushButton("Randomize All")
        self.btn_randomize_all.clicked.connect(self.randomize_all)
        button_row.addWidget(self.btn_randomize_all)

        self.btn_process = QPushButton("Process Selected Recipes")
        self.btn_process.clicked.connect(self.process_selected_recipes)
        button_row.addWidget(self.btn_process)
        layout.addLayout(button_row)

        self.lbl_weekly_status = QLabel("")
        self.lbl_weekly_status.setWordWrap(True)
        layout.addWidget(self.lbl_weekly_status)

        self.week_summary = QTextEdit()
        self.week_summary.setReadOnly(True)
        self.week_summary.setPlaceholderText("No schedule processed yet.")
        layout.addWidget(self.week_summary, 1)
        return tab

    def _build_new_recipe_tab(self) -> QWidget:
        tab = QWidget()
        layout = QVBoxLayout(tab)
        form = QFormLayout()

        self.ed_title = QLineEdit()
        self.ed_source = QLineEdit()
        self.ed_servings = QLineEdit()
        self.ed_prep = QLineEdit()
        self.ed_cook = QLineEdit()
        self.ed_total = QLineEdit()
        self.ed_ingredients = QLineEdit()
        self.ed_ingredients.setPlaceholderText("Comma separated")
        self.ed_instructions = QTextEdit()
        self.ed_instructions.setPlaceholderText("One instruction per line")
        self.ed_notes = QTextEdit()
        self.ed_notes.setPlaceholderText("One note per line")

        form.addRow("Title", self.ed_title)
        form.addRow("From", self.ed_source)
        form.addRow("Servings", self.ed_servings)
        form.addRow("Prep Time", self.ed_prep)
        form.addRow("Cook Time", self.ed_cook)
        form.addRow("Total Time", self.ed_total)
        form.addRow("Ingredients", self.ed_ingredients)
        form.addRow("Instructions", self.ed_instructions)
        form.addRow("Notes", self.ed_notes)
        layout.addLayout(form, 1)

        self.btn_save = QPushButton("Save Recipe")
        self.btn_save.clicked.connect(self.save_recipe)
        layout.addWidget(self.btn_save)

        self.lbl_save_status = QLabel("")
        self.lbl_save_status.setWordWrap(True)
        layout.addWidget(self.lbl_save_status)
        return tab

    def _build_view_tab(self) -> QWidget:
        tab = QWidget()
        layout = QVBoxLayout(tab)
        splitter = QSplitter(Qt.Horizontal)
        layout.addWidget(splitter, 1)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)

        self.search = QLineEdit()
        self.search.setPlaceholderText("Search recipes...")
        self._search_timer = QTimer()
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(300)
        self._search_timer.timeout.connect(self.apply_filter)
        self.search.textChanged.connect(lambda _: self._search_timer.start())
        left_layout.addWidget(self.search)

        self.list_widget = QListWidget()
        self.list_widget.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list_widget.itemSelectionChanged.connect(self.on_selection_changed)
        left_layout.addWidget(self.list_widget, 1)

        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(0, 0, 0, 0)

        self.recipe_view = QTextEdit()
        self.recipe_view.setReadOnly(True)
        right_layout.addWidget(self.recipe_view, 1)

        button_row = QHBoxLayout()
        self.chk_number = QCheckBox("Number instructions")
        button_row.addWidget(self.chk_number)
        button_row.addStretch()
        self.btn_pdf = QPushButton("Generate PDF")
        self.btn_pdf.setEnabled(False)
        self.btn_pdf.clicked.connect(self.generate_pdf)
        button_row.addWidget(self.btn_pdf)
        right_layout.addLayout(button_row)

        splitter.addWidget(left)
        splitter.addWidget(right)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 2)

        self.lbl_view_status = QLabel("")
        self.lbl_view_status.setWordWrap(True)
        layout.addWidget(self.lbl_view_status)
        return tab

    def refresh_data(self) -> None:
        self.dinner_pool = self.dinner_library.list_names()
        self.all_names = self.library.list_names()
        self._sync_day_combos()
        self.apply_filter()

    def _sync_day_combos(self) -> None:
        for day, combo in self.day_combos.items():
            combo.blockSignals(True)
            combo.clear()
            combo.addItem("")
            combo.addItems(self.dinner_pool)
            current = self.schedule.get(day)
            if current and current not in self.dinner_pool:
                combo.addItem(current)
            combo.setCurrentText(current)
            combo.blockSignals(False)

    def randomize_day(self, day: str) -> None:
        randomize(self.dinner_pool, self.schedule, self.rng, day=day)
        self._sync_day_combos()

    def randomize_all(self) -> None:
        randomize(self.dinner_pool, self.schedule, self.rng)
        self._sync_day_combos()

    def process_selected_recipes(self) -> None:
        self.lbl_weekly_status.setText("")
        try:
            shopping, report = materialize(
                self.schedule, self.dinner_library.read_bytes, self.config.schedule_dir
            )
        except RecipeBotError as exc:
            logger.error("Processing the weekly schedule failed: %s", exc)
            self.lbl_weekly_status.setText(f"Error during processing: {exc}")
            return
        self.lbl_weekly_status.setText(
            f"Processing completed successfully: {len(report.entries)} days, {len(shopping.items)} ingredients."
        )
        self._show_current_week()

    def _show_current_week(self) -> None:
        report = read_schedule_report(self.config.schedule_dir / SCHEDULE_REPORT_FILENAME)
        shopping = read_shopping_list(self.config.schedule_dir / SHOPPING_LIST_FILENAME)
        if not report.entries and not shopping.items:
            self.week_summary.setPlainText("")
            return
        self.week_summary.setPlainText(
            report.render() + "\nShopping List:\n" + shopping.render()
        )

    def save_recipe(self) -> None:
        recipe = build_recipe_from_form(
            self.ed_title.text(),
            self.ed_source.text(),
            self.ed_servings.text(),
            self.ed_prep.text(),
            self.ed_cook.text(),
            self.ed_total.text(),
            self.ed_ingredients.text(),
            self.ed_instructions.toPlainText(),
            self.ed_notes.toPlainText(),
        )
        try:
            path = self.library.save(recipe, self.config.generated_dir)
        except (ValueError, OSError) as exc:
            logger.error("Saving recipe %r failed: %s", recipe.title, exc)
            self.lbl_save_status.setText(f"Error saving recipe: {exc}")
            return
        self.lbl_save_status.setText(f"Recipe saved successfully to {path}")

    def apply_filter(self) -> None:
        names = self.library.search(self.search.text(), self.all_names)
        current = self.selected_name()
        self.list_widget.blockSignals(True)
        self.list_widget.clear()
        self.list_widget.addItems(names)
        if current in names:
            self.list_widget.setCurrentRow(names.index(current))
        self.list_widget.blockSignals(False)
        self.on_selection_changed()

    def selected_name(self) -> str:
        items = self.list_widget.selectedItems()
        return items[0].text() if items else ""

    def on_selection_changed(self) -> None:
        name = self.selected_name()
        self.btn_pdf.setEnabled(bool(name))
        if not name:
            self.recipe_view.setPlainText("")
            return
        try:
            recipe = self.library.load(name)
        except RecipeBotError as exc:
            self.recipe_view.setPlainText("")
            self.lbl_view_status.setText(f"Error reading recipe: {exc}")
            return
        self.lbl_view_status.setText("")
        self.recipe_view.setPlainText(format_recipe_text(recipe))

    def generate_pdf(self) -> None:
        name = self.selected_name()
        if not name:
            return
        try:
            recipe = self.library.load(name)
            path = export_recipe_pdf(
                recipe, self.config.pdf_dir, number_instructions=self.chk_number.isChecked()
            )
        except RecipeBotError as exc:
            logger.error("Generating a PDF for %r failed: %s", name, exc)
            self.lbl_view_status.setText(f"Error generating PDF: {exc}")
            return
        self.lbl_view_status.setText(f"PDF saved to {path}")


def main() -> int:
    try:
        config = load_config()
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Invalid configuration: %s", exc)
        return 1
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    win = MainWindow(config)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
