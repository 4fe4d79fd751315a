# main.py
from __future__ import annotations
import sys
import logging

from PySide6.QtWidgets import QApplication, QMessageBox

from app.config import load_settings
from ui.main_window import MainWindow


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("app.log", encoding="utf-8"),
        ],
    )
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.critical("Unhandled exception", exc_info=(exctype, value, tb))
        if QApplication.instance() is not None:
            QMessageBox.critical(
                None, "Application Error", f"{exctype.__name__}: {value}"
            )
        # exit with non-zero so run scripts don't think it succeeded
        sys.exit(1)

    sys.excepthook = excepthook


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_level)
    logging.getLogger(__name__).info(
        "Starting Typecache (source=%s, user=%s)",
        settings.api_url or settings.store_path, settings.user,
    )

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Typecache")
    app.setOrganizationName("Typecache")

    win = MainWindow(settings)
    win.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
