"""Allow running PomodoroTimer as a module: python -m pomodorotimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .app import PomodoroApp


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodorotimer")


def main() -> None:
    log = setup_logging(logging.DEBUG if "--debug" in sys.argv else logging.INFO)

    app = QApplication(sys.argv)
    app.setApplicationName("PomodoroTimer")
    app.setOrganizationName("PomodoroTimer")
    app.setQuitOnLastWindowClosed(False)

    window = PomodoroApp()
    window.show()
    log.info("PomodoroTimer ready")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
