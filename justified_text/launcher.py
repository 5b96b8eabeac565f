from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from justified_text.justifier import HAIR_SPACE, JustifiedLine, Justifier, MeasureFn
from justified_text.logging_utils import configure_logging, package_logger
from justified_text.settings import (
    DEBUG_CONFIG_ENABLED,
    DEV_MODE_ENV_VAR,
    DEV_SETTINGS_FILENAME,
    SETTINGS_FILENAME,
    JustifierSettings,
    load_dev_settings,
    load_settings,
)
from justified_text.version import __version__

_LOGGER = logging.getLogger("JustifiedText.Launcher")

THIN_SPACE_MARKER = "·"
DEMO_TEXT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor incididunt ut labore "
    "et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud exercitation ullamco laboris nisi ut "
    "aliquip ex ea commodo consequat.\nDuis aute irure dolor in reprehenderit in voluptate velit esse "
    "cillum dolore eu fugiat nulla pariatur. Excepteur sint occaecat cupidatat non proident, sunt in "
    "culpa qui officia deserunt mollit anim id est laborum."
)


def resolve_settings_path(args_settings: Optional[str]) -> Path:
    if args_settings:
        return Path(args_settings).expanduser().resolve()
    env_override = os.getenv("JUSTIFIED_TEXT_SETTINGS")
    if env_override:
        return Path(env_override).expanduser().resolve()
    return (Path.cwd() / SETTINGS_FILENAME).resolve()


def render_lines(lines: List[JustifiedLine], *, thin_space: str = HAIR_SPACE, show_thin_spaces: bool = False) -> str:
    """Lay finalized lines out one per output line for terminals and files."""
    rendered: List[str] = []
    for index, line in enumerate(lines):
        text = line.visible_text
        if show_thin_spaces:
            text = text.replace(thin_space, THIN_SPACE_MARKER)
        rendered.append(text)
        # A line ending on its own hard break already ends the output line.
        if index < len(lines) - 1 and not text.endswith(("\n", "\r")):
            rendered.append("\n")
    return "".join(rendered)


def _read_text(path: Optional[str], stdin: TextIO) -> str:
    if path:
        return Path(path).expanduser().read_text(encoding="utf-8")
    return stdin.read()


def _build_measure(args: argparse.Namespace, settings: JustifierSettings) -> MeasureFn:
    if args.advance is not None:
        from justified_text.measurement import fixed_advance_measurer

        return fixed_advance_measurer(args.advance)

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtGui import QGuiApplication

    from justified_text.fonts import build_font
    from justified_text.measurement import MeasurementCache, qt_text_measurer

    if QGuiApplication.instance() is None:
        # Kept on the namespace so the application outlives this function.
        args._qt_app = QGuiApplication([sys.argv[0]])
    family = args.font_family or settings.font_family
    point_size = args.point_size if args.point_size is not None else settings.point_size
    font = build_font(family, point_size)
    return MeasurementCache(qt_text_measurer(font), context=(family, point_size))


def _run_gui(text: str, settings: JustifierSettings, args: argparse.Namespace) -> int:
    from PyQt6.QtWidgets import QApplication

    from justified_text.fonts import build_font
    from justified_text.widget import JustifiedLabel

    app = QApplication(sys.argv)
    label = JustifiedLabel(text or DEMO_TEXT, settings=settings, debug_config=load_dev_settings(Path.cwd() / DEV_SETTINGS_FILENAME))
    family = args.font_family or settings.font_family
    point_size = args.point_size if args.point_size is not None else settings.point_size
    label.setFont(build_font(family, point_size))
    label.setMargin(16)
    label.setWindowTitle(f"justified-text {__version__}")
    label.resize(int(args.width) if args.width else 480, 360)
    label.show()
    exit_code = app.exec()
    label.shutdown()
    _LOGGER.info("Demo window exiting with code %s", exit_code)
    return int(exit_code)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="justify-text", description="Justify text to a fixed width")
    parser.add_argument("file", nargs="?", help="Text file to justify (defaults to stdin)")
    parser.add_argument("--width", type=float, help="Width budget in measurement units")
    parser.add_argument("--advance", type=float, help="Measure with a fixed advance per character instead of a font")
    parser.add_argument("--font-family", help="Font family used for measurement")
    parser.add_argument("--point-size", type=float, help="Font point size used for measurement")
    parser.add_argument("--seed", type=int, help="Seed for thin-space placement")
    parser.add_argument("--settings", help=f"Path to {SETTINGS_FILENAME}")
    parser.add_argument("--show-thin-spaces", action="store_true", help=f"Render thin spaces as '{THIN_SPACE_MARKER}'")
    parser.add_argument("--log-file", action="store_true", help="Also write logs to the rotating log file")
    parser.add_argument("--gui", action="store_true", help="Show the text in a justified label window")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[list[str]] = None, *, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    package_logger()
    settings_path = resolve_settings_path(args.settings)
    settings = load_settings(settings_path)
    if args.log_file:
        configure_logging(settings)
    if not DEBUG_CONFIG_ENABLED:
        _LOGGER.debug(
            "%s ignored (release mode). Export %s=1 to enable trace toggles.",
            DEV_SETTINGS_FILENAME,
            DEV_MODE_ENV_VAR,
        )
    _LOGGER.debug("Loaded settings from %s: %s", settings_path, settings)

    if args.gui:
        text = _read_text(args.file, stdin) if args.file else ""
        return _run_gui(text, settings, args)

    if args.width is None or args.width <= 0:
        parser.error("--width must be a positive number")

    text = _read_text(args.file, stdin)
    if text.endswith("\n"):
        text = text[:-1]
    seed = args.seed if args.seed is not None else settings.random_seed
    justifier = Justifier(
        _build_measure(args, settings),
        rng=random.Random(seed),
        thin_space=settings.thin_space,
        fill_limit_factor=settings.fill_limit_factor,
        min_fill_limit=settings.min_fill_limit,
    )
    lines = justifier.break_lines(text, args.width)
    _LOGGER.debug(
        "Justified %d chars into %d lines (filled=%d overflow=%d)",
        len(text),
        len(lines),
        sum(1 for line in lines if line.filled),
        sum(1 for line in lines if line.overflow),
    )
    if lines:
        stdout.write(render_lines(lines, thin_space=settings.thin_space, show_thin_spaces=args.show_thin_spaces))
        stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
