#!/usr/bin/env python3

import argparse
import logging
import os
from pathlib import Path

import uvicorn

from wiki.config import Config
from wiki.api import create_app_from_config
from wiki.setup import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """
    Parse the arguments.
    """
    parser = argparse.ArgumentParser(
        description="Serve a wiki storing each page as a text file."
    )
    parser.add_argument(
        "--config",
        help="Path to the config file",
        default="config.yaml",
    )
    parser.add_argument(
        "--storage", help="Directory holding the pages, overrides the config file"
    )
    parser.add_argument("--host", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to bind to (default: 8080)")
    parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload on file changes"
    )
    parser.add_argument("--log-level", help="Log level (default: info)")
    return parser.parse_args(argv)


def load_config(opts: argparse.Namespace) -> Config:
    """
    Read the config file and apply the command line overrides.
    """
    config = Config.read(opts.config)
    if opts.storage:
        config.storage.path = Path(opts.storage)
    if opts.host:
        config.server.host = opts.host
    if opts.port:
        config.server.port = opts.port
    if opts.reload:
        config.server.reload = True
    if opts.log_level:
        config.server.log_level = opts.log_level
    return config


def main(argv=None):
    opts = parse_args(argv)
    config = load_config(opts)
    setup_logging(config.server.log_level)
    logger.info(
        "Serving pages from %s on %s:%d",
        config.storage.path,
        config.server.host,
        config.server.port,
    )

    if config.server.reload:
        # the reloader imports the app by name, pass the settings through env
        os.environ["WIKI_CONFIG"] = str(opts.config)
        os.environ["WIKI_STORAGE_ROOT"] = str(config.storage.path)
        os.environ["WIKI_LOG_LEVEL"] = config.server.log_level
        app = "wiki.server:app"
    else:
        app = create_app_from_config(config)

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level=config.server.log_level,
    )


if __name__ == "__main__":
    main()
