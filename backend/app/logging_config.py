# app/logging_config.py
"""
Logging configuration shared by the entrypoint and the command-line helpers
(`python -m app.seed`, `python -m app.cache`). The API itself logs through
uvicorn's handlers once the server is running.
"""
import os
import logging

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


def configure_logging() -> None:
    """Configure the root logger from LOG_LEVEL (default INFO)."""
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    # Entrypoint has its own knob so it can stay verbose while the app is quiet
    entrypoint_level = os.getenv("LOG_LEVEL_ENTRYPOINT", log_level_name).upper()
    logging.getLogger("app.entrypoint").setLevel(
        getattr(logging, entrypoint_level, log_level)
    )
