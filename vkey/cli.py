"""VKey command line entry point."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import re
import signal
import sys
import traceback
from pathlib import Path

import vkey.log  # registers TRACE level and logger.trace()
from vkey.__version__ import __version__

_SIMULATE_TOKENS = re.compile(r"<BS>|<ESC>|<CR>|.", re.DOTALL)
_SIMULATE_NAMES = {"<BS>": "BackSpace", "<ESC>": "Escape", "<CR>": "Return"}


def setup_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """Log to a rotating file (everything) and stderr (warnings, or all with --debug)."""
    logger = logging.getLogger('vkey')
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if log_file is None:
        log_file = os.path.expanduser('~/.vkey.log')

    fmt = logging.Formatter(
        '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8',
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: could not set up file logging: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vkey',
        description='Vietnamese input method (Telex, VNI, VIQR) for X11',
    )
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', type=str, default=None, help='Path to config file')
    parser.add_argument('--logfile', type=str, default=None, help='Path to log file (default: ~/.vkey.log)')
    parser.add_argument('--scheme', type=str, default=None, help='Input scheme: Telex, VNI or VIQR')
    parser.add_argument('--encoding', type=str, default=None, help='Output encoding: Unicode, TCVN3 or VNI-Win')
    parser.add_argument(
        '--simulate', type=str, default=None, metavar='KEYS',
        help='Type KEYS through the engine and print the resulting text '
             '(<BS> backspace, <ESC> escape, <CR> enter)',
    )
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def simulate_keys(engine, keys: str, context_id: str = "simulate") -> str:
    """Return the text an application would show after typing *keys*.

    Consumed keys only change the screen through their edit; other keys
    land as typed after the edit.
    """
    from vkey.core.types import ResultKind

    screen = ""
    names = [_SIMULATE_NAMES.get(tok, tok) for tok in _SIMULATE_TOKENS.findall(keys)]
    for name, result in zip(names, engine.type_keys(context_id, names)):
        if result.edit.delete_count:
            screen = screen[:-result.edit.delete_count]
        screen += result.edit.insert_text
        if result.consumed or result.kind is ResultKind.MODE_TOGGLED:
            continue
        if name == "BackSpace":
            screen = screen[:-1]
        elif name == "Return":
            screen += "\n"
        elif name != "Escape":
            screen += name
    engine.commit(context_id)
    return screen


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log = setup_logging(debug=args.debug, log_file=args.logfile)

    from vkey.config import load_config
    from vkey.core.errors import ConfigError

    if args.simulate is not None:
        from vkey.core.engine import InputEngine

        config = load_config(args.config, args.debug)
        if args.scheme:
            config['scheme'] = args.scheme
        if args.encoding:
            config['default_encoding'] = args.encoding
        try:
            engine = InputEngine(config, debug=args.debug)
        except ConfigError as e:
            log.error("Invalid configuration: %s", e)
            return 2
        print(simulate_keys(engine, args.simulate))
        return 0

    log.info("VKey %s starting (pid %d)", __version__, os.getpid())

    from vkey.app import VKeyApp

    app = None
    try:
        app = VKeyApp(debug=args.debug, config_path=args.config, scheme=args.scheme, encoding=args.encoding)

        def signal_handler(signum: int, frame) -> None:
            log.info("Received %s, shutting down", signal.Signals(signum).name)
            app.request_stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        app.run()
        return 0

    except ConfigError as e:
        log.error("Invalid configuration: %s", e)
        return 2

    except KeyboardInterrupt:
        return 0

    except PermissionError as e:
        log.error("Permission error: %s", e)
        log.error("Input devices need the 'input' group: sudo usermod -a -G input $USER")
        log.debug(traceback.format_exc())
        return 1

    except (OSError, RuntimeError) as e:
        log.error("%s", e)
        log.debug(traceback.format_exc())
        return 1

    finally:
        log.info("VKey shutdown")


if __name__ == '__main__':
    sys.exit(main())
