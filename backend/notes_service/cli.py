"""Command line entry point: notes-service -h HOST -p PORT -c CACHE_DIR."""

import argparse
import logging

import uvicorn
from pydantic import ValidationError

from notes_service.config import Settings
from notes_service.main import configure_logging, create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    # -h is the host option, so help is only available as --help
    parser = argparse.ArgumentParser(description="Notes Service", add_help=False)
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", "--host", required=True, help="Server host address")
    parser.add_argument("-p", "--port", required=True, type=int, help="Server port")
    parser.add_argument("-c", "--cache", required=True, help="Cache directory path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (defaults to NOTES_LOG_LEVEL or INFO)",
    )
    return parser


def load_settings(argv: list[str] | None = None) -> Settings:
    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = {"host": args.host, "port": args.port, "cache_dir": args.cache}
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        return Settings(**overrides)
    except ValidationError as e:
        parser.error(str(e))


def main(argv: list[str] | None = None) -> None:
    settings = load_settings(argv)
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Server is running at http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
