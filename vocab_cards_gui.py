#!/usr/bin/env python3
"""
Vocabulary Cards Trainer - GUI Version
PyQt6-based graphical interface for reviewing imported word lists.

Usage:
    python vocab_cards_gui.py                    # Normal mode
    python vocab_cards_gui.py --test             # Test mode (1000x speed: 1 day = 86.4s)
    python vocab_cards_gui.py --no-autocomplete  # Start with dictionary lookups off
"""

import html
import logging
import sys

from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QTabWidget, QLabel, QPushButton, QLineEdit, QCheckBox, QFileDialog,
    QTableWidget, QTableWidgetItem, QHeaderView, QFrame, QMessageBox,
    QGridLayout
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont

from vocab_cards import (
    AUTO_COMPLETE, DAY_MS, DB_PATH, TEST_MODE, TIME_SCALE,
    ReviewSession, collection_stats, format_time_until, open_store,
    write_export
)


class ReviewTab(QWidget):
    """Flashcard-style review interface."""

    def __init__(self, session: ReviewSession, parent=None):
        super().__init__(parent)
        self.session = session
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(20)
        layout.setContentsMargins(30, 20, 30, 20)

        self.due_label = QLabel("Due: 0 cards")
        self.due_label.setFont(QFont("Arial", 12))
        layout.addWidget(self.due_label)

        # Flashcard frame
        self.card_frame = QFrame()
        self.card_frame.setFrameStyle(QFrame.Shape.Box | QFrame.Shadow.Raised)
        self.card_frame.setLineWidth(2)
        self.card_frame.setMinimumHeight(250)
        card_layout = QVBoxLayout(self.card_frame)
        card_layout.setSpacing(15)
        card_layout.setContentsMargins(30, 30, 30, 30)

        self.word_label = QLabel("")
        self.word_label.setFont(QFont("Arial", 28, QFont.Weight.Bold))
        self.word_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        card_layout.addWidget(self.word_label)

        self.ipa_label = QLabel("")
        self.ipa_label.setFont(QFont("Courier", 13))
        self.ipa_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.ipa_label.setStyleSheet("color: #4f46e5;")
        card_layout.addWidget(self.ipa_label)

        # Pre-recorded pronunciation, opened by the system player
        self.audio_label = QLabel("")
        self.audio_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.audio_label.setOpenExternalLinks(True)
        card_layout.addWidget(self.audio_label)

        separator = QFrame()
        separator.setFrameShape(QFrame.Shape.HLine)
        separator.setFrameShadow(QFrame.Shadow.Sunken)
        card_layout.addWidget(separator)

        # Meaning and example stay hidden until revealed
        self.meaning_label = QLabel("")
        self.meaning_label.setFont(QFont("Arial", 14))
        self.meaning_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.meaning_label.setWordWrap(True)
        card_layout.addWidget(self.meaning_label)

        self.example_label = QLabel("")
        self.example_label.setFont(QFont("Arial", 12, italic=True))
        self.example_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.example_label.setWordWrap(True)
        self.example_label.setStyleSheet("color: #666;")
        card_layout.addWidget(self.example_label)

        self.reveal_btn = QPushButton("Show Answer")
        self.reveal_btn.setFont(QFont("Arial", 12))
        self.reveal_btn.setMinimumHeight(40)
        self.reveal_btn.clicked.connect(self.toggle_answer)
        card_layout.addWidget(self.reveal_btn)

        layout.addWidget(self.card_frame)

        # Rating buttons
        rating_layout = QHBoxLayout()
        rating_layout.setSpacing(20)
        self.rating_buttons = {}
        for rating, text, color in (
            ('again', "Again", "#ffcccc"),
            ('hard', "Hard", "#ffffcc"),
            ('good', "Good", "#ccffcc"),
        ):
            btn = QPushButton(text)
            btn.setFont(QFont("Arial", 12))
            btn.setMinimumHeight(50)
            btn.setMinimumWidth(120)
            btn.setStyleSheet(f"background-color: {color};")
            btn.clicked.connect(lambda _checked=False, r=rating: self.submit_rating(r))
            rating_layout.addWidget(btn)
            self.rating_buttons[rating] = btn
        layout.addLayout(rating_layout)

        self.feedback_label = QLabel("")
        self.feedback_label.setFont(QFont("Arial", 11))
        self.feedback_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.feedback_label)

        layout.addStretch()

    def refresh(self):
        """Pick the current card and redraw."""
        self.session.refresh()
        self.show_card()

    def show_card(self):
        card = self.session.current
        count = collection_stats(self.session.store.cards, self.session.clock())['due']
        self.due_label.setText(f"Due: {count} card{'s' if count != 1 else ''}")

        for btn in self.rating_buttons.values():
            btn.setVisible(card is not None)
        self.reveal_btn.setVisible(card is not None)

        if card is None:
            self.word_label.setText("No cards due")
            self.ipa_label.setText("")
            self.audio_label.setText("")
            self.meaning_label.setText("Import a word list or wait for the next review.")
            self.example_label.setText("")
            return

        self.word_label.setText(card.word)
        self.ipa_label.setText(card.ipa)
        if card.audio:
            self.audio_label.setText(f'<a href="{html.escape(card.audio)}">Play pronunciation</a>')
        else:
            self.audio_label.setText("")
        if self.session.answer_visible:
            self.meaning_label.setText(card.meaning)
            self.example_label.setText(card.example)
            self.reveal_btn.setText("Hide Answer")
        else:
            self.meaning_label.setText("")
            self.example_label.setText("")
            self.reveal_btn.setText("Show Answer")

    def toggle_answer(self):
        self.session.toggle_answer()
        self.show_card()

    def submit_rating(self, rating):
        """Submit a rating for the current card."""
        updated = self.session.rate(rating)
        if updated is not None:
            self.feedback_label.setText(
                f"'{updated.word}': next review in {updated.interval} day(s)")
        self.show_card()


class WordListTab(QWidget):
    """Table view of all cards."""

    def __init__(self, session: ReviewSession, parent=None):
        super().__init__(parent)
        self.session = session
        self.all_cards = []
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(10)
        layout.setContentsMargins(20, 20, 20, 20)

        header_layout = QHBoxLayout()

        search_label = QLabel("Search:")
        search_label.setFont(QFont("Arial", 11))
        header_layout.addWidget(search_label)

        self.search_input = QLineEdit()
        self.search_input.setFont(QFont("Arial", 11))
        self.search_input.setPlaceholderText("Filter words...")
        self.search_input.textChanged.connect(self.filter_cards)
        self.search_input.setMaximumWidth(200)
        header_layout.addWidget(self.search_input)

        header_layout.addStretch()

        self.count_label = QLabel("Total: 0")
        self.count_label.setFont(QFont("Arial", 11))
        header_layout.addWidget(self.count_label)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.setFont(QFont("Arial", 10))
        refresh_btn.clicked.connect(self.refresh)
        header_layout.addWidget(refresh_btn)

        layout.addLayout(header_layout)

        self.table = QTableWidget()
        self.table.setColumnCount(5)
        self.table.setHorizontalHeaderLabels(["Word", "IPA", "Interval", "Next Review", "Ease"])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        for col in range(1, 5):
            self.table.horizontalHeader().setSectionResizeMode(col, QHeaderView.ResizeMode.ResizeToContents)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setAlternatingRowColors(True)
        self.table.setSortingEnabled(True)
        layout.addWidget(self.table)

    def refresh(self):
        """Reload cards from the store."""
        self.all_cards = self.session.store.cards
        self.filter_cards(self.search_input.text())

    def display_cards(self, cards):
        self.table.setSortingEnabled(False)
        self.table.setRowCount(len(cards))

        now = self.session.clock()
        for row, card in enumerate(cards):
            item = QTableWidgetItem(card.word)
            item.setData(Qt.ItemDataRole.UserRole, card.id)
            self.table.setItem(row, 0, item)
            self.table.setItem(row, 1, QTableWidgetItem(card.ipa))
            self.table.setItem(row, 2, QTableWidgetItem(f"{card.interval}d"))
            self.table.setItem(row, 3, QTableWidgetItem(format_time_until(card.due, now)))
            self.table.setItem(row, 4, QTableWidgetItem(f"{card.ease:.2f}"))

        self.table.setSortingEnabled(True)
        self.count_label.setText(f"Total: {len(cards)}")

    def filter_cards(self, search_text):
        """Filter displayed cards by word or meaning."""
        if not search_text:
            self.display_cards(self.all_cards)
            return
        search_lower = search_text.lower()
        self.display_cards([
            card for card in self.all_cards
            if search_lower in card.word.lower() or search_lower in card.meaning.lower()
        ])


class StatsTab(QWidget):
    """Statistics dashboard."""

    def __init__(self, session: ReviewSession, parent=None):
        super().__init__(parent)
        self.session = session
        self.setup_ui()

    def setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(20)
        layout.setContentsMargins(40, 30, 40, 30)

        title = QLabel("Statistics")
        title.setFont(QFont("Arial", 18, QFont.Weight.Bold))
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        stats_frame = QFrame()
        stats_frame.setFrameStyle(QFrame.Shape.Box | QFrame.Shadow.Raised)
        stats_layout = QGridLayout(stats_frame)
        stats_layout.setSpacing(15)
        stats_layout.setContentsMargins(30, 20, 30, 20)

        self.stat_labels = {}
        stat_items = [
            ("Total Cards:", "total"),
            ("Never Rated:", "new"),
            ("Due Now:", "due"),
            ("Average Ease:", "avg_ease"),
        ]
        for row, (label_text, key) in enumerate(stat_items):
            label = QLabel(label_text)
            label.setFont(QFont("Arial", 12))
            stats_layout.addWidget(label, row, 0)

            value_label = QLabel("0")
            value_label.setFont(QFont("Arial", 14, QFont.Weight.Bold))
            value_label.setAlignment(Qt.AlignmentFlag.AlignRight)
            stats_layout.addWidget(value_label, row, 1)
            self.stat_labels[key] = value_label

        layout.addWidget(stats_frame)

        if TEST_MODE:
            test_label = QLabel("Test Mode: ON (1000x speed)")
            test_label.setFont(QFont("Arial", 11))
            test_label.setStyleSheet("color: orange;")
            test_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            layout.addWidget(test_label)

        layout.addStretch()

    def refresh(self):
        """Reload statistics."""
        stats = collection_stats(self.session.store.cards, self.session.clock())
        self.stat_labels['total'].setText(str(stats['total']))
        self.stat_labels['new'].setText(str(stats['new']))
        self.stat_labels['due'].setText(str(stats['due']))
        self.stat_labels['avg_ease'].setText(f"{stats['avg_ease']:.2f}" if stats['total'] else "N/A")


class MainWindow(QMainWindow):
    """Main application window with tabbed interface."""

    def __init__(self, store=None):
        super().__init__()
        self.store = store if store is not None else open_store(DB_PATH)
        self.session = ReviewSession(
            self.store, day_ms=DAY_MS // TIME_SCALE, on_card_changed=self.on_card_changed)
        self.setup_ui()

    def setup_ui(self):
        title = "Vocabulary Cards"
        if TEST_MODE:
            title += " [TEST MODE]"
        self.setWindowTitle(title)
        self.setMinimumSize(600, 500)
        self.resize(700, 550)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(10, 10, 10, 10)

        # Import / export bar
        bar_layout = QHBoxLayout()
        import_btn = QPushButton("Import...")
        import_btn.clicked.connect(self.choose_import_file)
        bar_layout.addWidget(import_btn)

        self.autocomplete_check = QCheckBox("Auto-complete IPA and meanings")
        self.autocomplete_check.setChecked(AUTO_COMPLETE)
        bar_layout.addWidget(self.autocomplete_check)
        bar_layout.addStretch()

        export_json_btn = QPushButton("Export JSON")
        export_json_btn.clicked.connect(lambda: self.choose_export_file('json'))
        bar_layout.addWidget(export_json_btn)

        export_csv_btn = QPushButton("Export CSV")
        export_csv_btn.clicked.connect(lambda: self.choose_export_file('csv'))
        bar_layout.addWidget(export_csv_btn)
        layout.addLayout(bar_layout)

        self.tabs = QTabWidget()
        self.tabs.setFont(QFont("Arial", 11))

        self.review_tab = ReviewTab(self.session, self)
        self.list_tab = WordListTab(self.session, self)
        self.stats_tab = StatsTab(self.session, self)

        self.tabs.addTab(self.review_tab, "Review")
        self.tabs.addTab(self.list_tab, "Word List")
        self.tabs.addTab(self.stats_tab, "Statistics")
        self.tabs.currentChanged.connect(self.on_tab_changed)

        layout.addWidget(self.tabs)

        self.review_tab.refresh()

    def on_card_changed(self, card):
        """Announce the newly shown card in the status bar."""
        if card is None:
            self.statusBar().showMessage("Nothing due for review")
        else:
            self.statusBar().showMessage(f"Reviewing: {card.word}")

    def on_tab_changed(self, index):
        """Refresh tab content when switching tabs."""
        if index == 0:
            self.review_tab.refresh()
        elif index == 1:
            self.list_tab.refresh()
        elif index == 2:
            self.stats_tab.refresh()

    def refresh_all_tabs(self):
        self.review_tab.refresh()
        self.list_tab.refresh()
        self.stats_tab.refresh()

    def import_file(self, path) -> dict:
        result = self.session.import_file(path, auto_complete=self.autocomplete_check.isChecked())
        self.refresh_all_tabs()
        return result

    def choose_import_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Import Word List", "", "Word lists (*.csv *.json);;All files (*)")
        if not path:
            return
        QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        try:
            result = self.import_file(path)
        finally:
            QApplication.restoreOverrideCursor()
        if result['success']:
            self.statusBar().showMessage(result['message'], 5000)
        else:
            QMessageBox.warning(self, "Import Failed", result['message'])

    def choose_export_file(self, fmt):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Cards", f"vocab_cards.{fmt}", f"{fmt.upper()} files (*.{fmt})")
        if not path:
            return
        result = write_export(self.store.cards, path)
        if result['success']:
            self.statusBar().showMessage(result['message'], 5000)
        else:
            QMessageBox.warning(self, "Export Failed", result['message'])

    def closeEvent(self, event):
        """Close the store when the window closes."""
        self.store.close()
        event.accept()


def main():
    logging.basicConfig(
        level=logging.DEBUG if "--verbose" in sys.argv else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    app.setStyle('Fusion')
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
