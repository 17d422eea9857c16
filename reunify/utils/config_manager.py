"""
Application Preference Persistence
==================================

This module manages the user preferences that survive between runs of
Reunify: which Gemini models to call, the page URL used for share links and
the last folder photos were picked from.

Key Responsibilities:
---------------------
- File-System Persistence: Stores preferences in a hidden JSON file in the
  user's home directory (`~/.reunify_config.json`).
- Field Mapping: Only keys that exist on ``AppConfig`` are applied.

The API key is never written to disk; it comes from the environment.
Photos, letters and recordings are session-only and never persisted.
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from reunify.core import config
from reunify.utils.logger import log_config

CONFIG_PATH = Path.home() / ".reunify_config.json"


@dataclass
class AppConfig:
    """
    Persisted user preferences.

    Attributes:
        image_model: Gemini model used to composite the photos.
        text_model: Gemini model used to write the letter.
        share_base_url: Page URL that locket links are built on.
        last_directory: Folder the file dialog opens in.
    """
    image_model: str = config.IMAGE_MODEL
    text_model: str = config.TEXT_MODEL
    share_base_url: str = config.DEFAULT_SHARE_URL
    last_directory: str = ""


def save_config(app_config: AppConfig, path: Optional[Path] = None):
    """
    Persist preferences as pretty-printed JSON.

    Failures are logged and swallowed; losing preferences never blocks exit.
    """
    logger = logging.getLogger(__name__)
    path = path or CONFIG_PATH

    try:
        data = asdict(app_config)
        log_config("Saving Configuration", data, logger)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Configuration saved successfully to {path}")

    except Exception as e:
        logger.error(f"Failed to save configuration: {e}", exc_info=True)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load preferences, falling back to defaults for a missing or corrupt file.

    Unknown keys and values of the wrong type are ignored.
    """
    logger = logging.getLogger(__name__)
    path = path or CONFIG_PATH
    app_config = AppConfig()

    if not path.exists():
        logger.info(f"No existing configuration file found at {path}")
        return app_config

    try:
        logger.info(f"Loading configuration from {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            logger.error(f"Configuration file {path} does not contain an object")
            return app_config

        log_config("Loaded Configuration", data, logger)

        for k, v in data.items():
            if hasattr(app_config, k) and isinstance(v, str):
                setattr(app_config, k, v.strip())

        logger.info("Configuration loaded and applied successfully")

    except json.JSONDecodeError as e:
        logger.error(f"Configuration file is corrupted: {e}", exc_info=True)
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}", exc_info=True)

    return app_config
