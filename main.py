from __future__ import annotations
import sys, os, logging, traceback

from PyQt6.QtWidgets import QApplication, QMessageBox
from PyQt6.QtGui import QIcon

# Let you run from project root without installing as a package
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

logger = logging.getLogger("questcompanion")


# ---- Global crash catcher so the app shows a dialog instead of dying ----
def _excepthook(exc_type, exc, tb):
    err = "".join(traceback.format_exception(exc_type, exc, tb))
    logger.error("Unhandled error:\n%s", err)
    app = QApplication.instance()
    if app is None:
        # If Qt isn't ready yet, print to console (safe during early import failures)
        print(err, file=sys.stderr)
        return
    try:
        QMessageBox.critical(None, "Unhandled Error", err)
    except Exception:
        print(err, file=sys.stderr)

sys.excepthook = _excepthook
# ------------------------------------------------------------------------


def main() -> int:
    # Create QApplication first (prevents accidental widget creation during imports).
    app = QApplication(sys.argv)

    from questcompanion.core.errors import SettingsCorruptError  # noqa: E402
    from questcompanion.core.settings import APP, APP_VERSION, ORG, user_data_dir  # noqa: E402
    from questcompanion.ui.ui_enhancements import init_basic_logger  # noqa: E402

    app.setOrganizationName(ORG)
    app.setApplicationName(APP)
    app.setApplicationVersion(APP_VERSION)
    init_basic_logger(user_data_dir() / "logs")
    logger.info("Starting %s v%s", APP, APP_VERSION)

    # Help Windows taskbar use your icon instead of a generic one.
    if sys.platform.startswith("win"):
        import ctypes  # noqa: E402
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID("QuestCompanion.Desktop")

    # Set the application icon (taskbar/dock).
    from questcompanion.utils.resources import find_app_icon  # noqa: E402
    ico_path = find_app_icon()
    if ico_path:
        app.setWindowIcon(QIcon(ico_path))

    # Import UI after QApplication exists.
    from questcompanion.ui.controller import QuestController  # noqa: E402
    from questcompanion.ui.main_window import MainWindow  # noqa: E402

    controller = QuestController()
    try:
        controller.start()
    except SettingsCorruptError as e:
        # leave the user's file alone; they can fix or remove it
        logger.error("%s", e)
        QMessageBox.critical(None, "Settings Error", str(e))
        return 1

    w = MainWindow(controller)
    w.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
