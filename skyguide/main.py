"""Entry point: CLI argument parsing + session + uvicorn startup."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import uvicorn

from skyguide.catalog.bright_stars import load_default_catalog
from skyguide.config import load_config
from skyguide.session import SkyGuideSession
from skyguide.web.app import create_app


def setup_logging(log_dir: str, verbose: bool = False) -> None:
    """Configure logging to both console and file."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_path / "skyguide.log"),
        ],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sky guide: live star positions and gaze-selected constellations"
    )
    parser.add_argument(
        "-c", "--config",
        default="config/default.yaml",
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--lat",
        type=float,
        default=None,
        help="Fixed observer latitude in degrees (skips waiting for a feed)",
    )
    parser.add_argument(
        "--lon",
        type=float,
        default=None,
        help="Fixed observer longitude in degrees, east positive",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Web server host (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Web server port (overrides config)",
    )
    parser.add_argument(
        "--no-web",
        action="store_true",
        help="Run the tick loop without the web bridge",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()

    # Load configuration
    config = load_config(args.config)

    # Apply CLI overrides
    if args.host:
        config.web.host = args.host
    if args.port:
        config.web.port = args.port
    if args.no_web:
        config.web.enabled = False

    # Setup logging
    setup_logging(config.logging.log_dir, args.verbose)
    logger = logging.getLogger(__name__)
    logger.info("Starting Sky Guide")

    catalog = load_default_catalog(config.catalog.magnitude_limit)
    session = SkyGuideSession(config, catalog)

    if args.lat is not None and args.lon is not None:
        session.tracker.use_fallback(args.lat, args.lon)
    elif not session.ensure_position():
        logger.info("Waiting for a position fix...")

    if not config.web.enabled:
        session.start()
        try:
            while True:
                time.sleep(1.0)
        except KeyboardInterrupt:
            logger.info("Shutting down...")
        finally:
            session.stop()
            logger.info("Shutdown complete")
        return

    logger.info("Web bridge: http://%s:%d", config.web.host, config.web.port)
    app = create_app(session)
    try:
        # Blocks until shutdown; the app lifespan starts and stops the session
        uvicorn.run(
            app,
            host=config.web.host,
            port=config.web.port,
            log_level="info",
            loop="asyncio",
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
