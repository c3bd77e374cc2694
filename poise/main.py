"""Main application entry point for Poise."""

import sys
import argparse
import logging
import threading
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .config import PoiseConfig
from .recording.errors import AlreadyRunningError, PermissionDeniedError
from .services.session_manager import SessionManager
from .ui.monitor_screen import MonitorScreen, render_history, render_series, render_summary

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = PoiseConfig(config_path)
        # Command line level overrides config
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = Console()
        self.session_manager = SessionManager(self.config)
        self.stop_event = threading.Event()

    def record(self, kind: str, duration: Optional[float], replay_file: Optional[str] = None) -> int:
        """Record one session, showing the live monitor until duration or Ctrl+C."""
        provider = self.session_manager.create_provider(kind, replay_file=replay_file)
        try:
            recorder = self.session_manager.start_recording(kind, provider=provider)
        except PermissionDeniedError as e:
            self.console.print(f"[bold red]Permission denied:[/] {e}")
            return 1
        except AlreadyRunningError:
            logger.warning("Recording already in progress")
            return 0

        try:
            MonitorScreen(recorder, console=self.console).run(self.stop_event, duration=duration)
        except KeyboardInterrupt:
            logger.info("Recording interrupted by user")
        finally:
            summary = self.session_manager.stop_recording()

        if summary is None:
            self.console.print("[yellow]No samples were recorded.[/]")
            return 0

        self.console.print(render_summary(summary))
        return 0

    def history(self, kind: Optional[str]) -> int:
        sessions = self.session_manager.list_sessions(kind)
        if not sessions:
            self.console.print("No recorded sessions.")
            return 0
        self.console.print(render_history(sessions))
        return 0

    def show(self, session_id: str, points: Optional[int]) -> int:
        summary = self.session_manager.find_session(session_id)
        if summary is None:
            self.console.print(f"[red]Session not found:[/] {session_id}")
            return 1
        self.console.print(render_summary(summary))
        series = self.session_manager.chart_series(summary, points)
        self.console.print(render_series(series, summary.channel_names))
        return 0

    def delete(self, session_id: str) -> int:
        summary = self.session_manager.find_session(session_id)
        if summary is None:
            self.console.print(f"[red]Session not found:[/] {session_id}")
            return 1
        self.session_manager.delete_session(summary.kind, summary.id)
        self.console.print(f"Deleted session {summary.id}")
        return 0

    def cleanup(self, max_age_days: Optional[int]) -> int:
        removed = self.session_manager.cleanup_old_sessions(max_age_days)
        self.console.print(f"Removed {removed} old sessions")
        return 0


def setup_logging(config: PoiseConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/poise.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Poise starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poise",
        description="Poise - presentation practice session recorder",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for poise.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="Poise v0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    record = subparsers.add_parser("record", help="Record a practice session")
    record.add_argument("kind", choices=["hands", "voice"], help="Which sensor to record")
    record.add_argument("--duration", type=float, help="Stop after this many seconds (default: Ctrl+C)")
    record.add_argument("--replay-file", type=str, help="Hand-tracking stream to replay (JSON lines)")

    history = subparsers.add_parser("history", help="List recorded sessions")
    history.add_argument("--kind", choices=["hands", "voice"], help="Only list one kind")

    show = subparsers.add_parser("show", help="Show a session and its chart series")
    show.add_argument("session_id")
    show.add_argument("--points", type=int, help="Number of chart points (default: from config)")

    delete = subparsers.add_parser("delete", help="Delete a recorded session")
    delete.add_argument("session_id")

    cleanup = subparsers.add_parser("cleanup", help="Delete sessions older than the configured age")
    cleanup.add_argument("--max-age-days", type=int)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for Poise application."""
    args = build_parser().parse_args(argv)

    try:
        server = Server(args.config, args.log_level)
        if args.command == "record":
            code = server.record(args.kind, args.duration, args.replay_file)
        elif args.command == "history":
            code = server.history(args.kind)
        elif args.command == "show":
            code = server.show(args.session_id, args.points)
        elif args.command == "delete":
            code = server.delete(args.session_id)
        else:
            code = server.cleanup(args.max_age_days)
    except KeyboardInterrupt:
        print("\nGoodbye!")
        code = 0
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
