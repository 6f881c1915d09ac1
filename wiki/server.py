"""
Server module for uvicorn reload mode.
This module creates the FastAPI application that can be imported by uvicorn.
"""

import os

from wiki.api import create_app_from_config
from wiki.config import Config
from wiki.setup import setup_logging

# Get the config file from environment variable or use default
config = Config.read(os.environ.get("WIKI_CONFIG", "config.yaml"))

# the reloader runs this in a fresh process, logging is not set up yet
setup_logging(config.server.log_level)

# Create the application
app = create_app_from_config(config)
