import argparse
import dataclasses
import os
import sys
from PyQt6.QtWidgets import QApplication

# Suppress Qt warnings including QPainter warnings
os.environ.setdefault('QT_LOGGING_RULES', '*.debug=false')
from PyQt6.QtCore import qInstallMessageHandler, QtMsgType
from dozeframe.catalog import scan_photo_dirs
from dozeframe.logger import set_log_level, add_file_handler, info, warning
from dozeframe.settings import SettingsStore
from dozeframe.slideshow_window import SlideshowWindow
from dozeframe.translations import get_language, init_language, set_language, TRANSLATIONS


def qt_message_handler(mode, context, message):
    """Route Qt warnings into our log, dropping QPainter noise"""
    if 'QPainter' in message:
        return
    if mode in (QtMsgType.QtWarningMsg, QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
        warning(f"Qt: {message}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Dozeframe photo slideshow screensaver")
    parser.add_argument('directories', nargs='*',
                        help="Photo folders to show (defaults to the saved folders)")
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help="Console log level (defaults to the saved level)")
    parser.add_argument('--log-file', help="Also write the log to this file")
    parser.add_argument('--language', choices=sorted(TRANSLATIONS))
    parser.add_argument('--windowed', action='store_true', help="Do not go full screen")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Install custom message handler to suppress Qt warnings
    qInstallMessageHandler(qt_message_handler)

    app = QApplication(sys.argv)
    app.setApplicationName("Dozeframe")

    init_language()
    if args.language:
        set_language(args.language)

    store = SettingsStore()
    settings = store.load()

    log_level = args.log_level or settings.log_level
    set_log_level(log_level)
    if args.log_file:
        add_file_handler(args.log_file)
    info(f"Dozeframe starting with log level: {log_level}, language: {get_language()}")

    directories = args.directories or list(settings.photo_dirs)
    if args.directories and tuple(args.directories) != settings.photo_dirs:
        store.save(dataclasses.replace(settings, photo_dirs=tuple(args.directories)))
    if not directories:
        warning("No photo folders given or saved")

    catalog = scan_photo_dirs(directories, settings.square_sensitivity)

    window = SlideshowWindow(catalog, store)
    if args.windowed:
        window.resize(1280, 800)
        window.show()
    else:
        window.showFullScreen()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
