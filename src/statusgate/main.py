"""Main entry point for StatusGate."""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(
    level: str = "INFO",
    debug: bool = False,
    log_format: str = "text",
    log_to_file: bool = True,
    log_file_path: Path | None = None,
    log_file_max_bytes: int = 10 * 1024 * 1024,
    log_file_backup_count: int = 5,
) -> None:
    """Configure logging for the application with console and optional file output.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR)
        debug: If True, overrides level to DEBUG
        log_format: 'text' for human-readable lines, 'json' for one object per line
        log_to_file: Enable file logging in addition to console
        log_file_path: Path to log file (ignored unless log_to_file)
        log_file_max_bytes: Maximum size per log file before rotation
        log_file_backup_count: Number of rotated backup files to keep
    """
    effective_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(effective_level)
    root_logger.handlers.clear()

    from statusgate.utils.logging import (
        CorrelationIDFilter,
        JSONFormatter,
        LogSanitizer,
        SanitizingFormatter,
    )

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = SanitizingFormatter(
            "%(asctime)s [%(levelname)s] [%(correlation_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(effective_level)
    console_handler.setFormatter(formatter)
    # Filters are not inherited by child loggers, so they go on handlers
    console_handler.addFilter(LogSanitizer())
    console_handler.addFilter(CorrelationIDFilter())
    root_logger.addHandler(console_handler)

    if log_to_file and log_file_path:
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=log_file_max_bytes,
                backupCount=log_file_backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(effective_level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(LogSanitizer())
            file_handler.addFilter(CorrelationIDFilter())
            root_logger.addHandler(file_handler)
            logging.info(f"File logging enabled: {log_file_path}")
        except OSError as e:
            logging.warning(f"Failed to initialize file logging: {e}. Using console-only logging.")

    # Telethon is chatty at INFO (connection and update loop details)
    logging.getLogger("telethon").setLevel(max(effective_level, logging.WARNING))


def build_parser() -> argparse.ArgumentParser:
    """Command-line flags; everything else is configured through STATUSGATE_* variables."""
    from statusgate import __version__

    parser = argparse.ArgumentParser(
        prog="statusgate",
        description="Password-protected gateway for posting status updates",
    )
    parser.add_argument("--host", help="Interface to listen on (overrides STATUSGATE_HOST)")
    parser.add_argument("--port", type=int, help="Port to listen on (overrides STATUSGATE_PORT)")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Where config.json and the Telegram session live (overrides STATUSGATE_DATA_DIR)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Print the effective configuration, check it and exit",
    )
    parser.add_argument("--version", action="version", version=f"StatusGate {__version__}")
    return parser


def _report_errors(errors: list[str]) -> None:
    print("Configuration validation failed:")
    for error in errors:
        print(f"\n{error}")


def main() -> None:
    """Run the StatusGate web application."""
    import uvicorn

    from statusgate import __version__
    from statusgate.config import Settings, reset_settings
    from statusgate.transport import TransportConfigError
    from statusgate.web.app import create_app

    args = build_parser().parse_args()

    overrides = {
        name: value
        for name, value in (("host", args.host), ("port", args.port), ("data_dir", args.data_dir))
        if value is not None
    }
    reset_settings()
    settings = Settings(**overrides)

    if args.validate:
        settings.print_config()
        print()
        errors = settings.validate()
        if errors:
            _report_errors(errors)
            sys.exit(1)
        print("Configuration is valid")
        sys.exit(0)

    setup_logging(
        level=settings.log_level,
        debug=settings.debug,
        log_format=settings.log_format,
        log_to_file=settings.log_to_file,
        log_file_path=settings.log_file_path if settings.log_to_file else None,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )

    errors = settings.validate()
    if errors:
        _report_errors(errors)
        print("\nRun with --validate to check configuration without starting the server")
        sys.exit(1)

    try:
        app = create_app(settings=settings)
    except TransportConfigError as e:
        print(f"Cannot start messaging client: {e}")
        sys.exit(1)

    print("=" * 60)
    print(f"StatusGate v{__version__}")
    print("=" * 60)
    print(f"Server:        http://{settings.host}:{settings.port}")
    print(f"Setup page:    http://{settings.host}:{settings.port}/setup")
    print(f"Data dir:      {settings.data_dir}")
    print(f"Log level:     {settings.log_level}")
    if settings.log_to_file:
        print(f"Log file:      {settings.log_file_path}")
    print("=" * 60)

    try:
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
            log_config=None,
        )
    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)


if __name__ == "__main__":
    main()
