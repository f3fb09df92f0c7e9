import json
import logging
import os
from typing import Dict, Optional, Any

logger = logging.getLogger(__name__)

CONFIG_FILE_PATH = "config.json"

OPTION_KEYS = {
    "last_modified", "lastModified", "change_frequency", "changeFrequency",
    "priority", "news", "images", "alternate",
}


def load_config(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Loads the configuration from config.json (or the given path)."""
    config_path = path or CONFIG_FILE_PATH
    if not os.path.exists(config_path):
        logger.error(f"Configuration file not found: {config_path}")
        return None
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        logger.info(f"Successfully loaded configuration from {config_path}")
        if not validate_config(config_data):
            return None
        return config_data
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON from {config_path}: {e}")
        return None
    except OSError as e:
        logger.error(f"Could not read configuration file {config_path}: {e}")
        return None


def validate_config(config: Dict[str, Any]) -> bool:
    """Validates the structure and content of the configuration."""
    if not isinstance(config, dict):
        logger.error("Configuration must be a dictionary.")
        return False

    for key in ("base_url", "output_file"):
        if key in config and (not isinstance(config[key], str) or not config[key].strip()):
            logger.error(f"'{key}' must be a non-empty string.")
            return False

    base_url = config.get("base_url")
    if base_url and not base_url.startswith(("http://", "https://")):
        logger.error(f"'base_url' must be an absolute http(s) URL, got: {base_url}")
        return False

    if "max_entries_count" in config:
        limit = config["max_entries_count"]
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            logger.error("'max_entries_count' must be a positive integer.")
            return False

    for key in ("declare_news", "declare_images"):
        if key in config and not isinstance(config[key], bool):
            logger.error(f"'{key}' must be true or false.")
            return False

    defaults = config.get("default_options", {})
    if not isinstance(defaults, dict):
        logger.error("'default_options' must be a dictionary.")
        return False
    for key in ("news", "alternate"):
        if defaults.get(key) is not None and not isinstance(defaults[key], dict):
            logger.error(f"'default_options.{key}' must be a dictionary.")
            return False
    images = defaults.get("images")
    if images is not None and (
        not isinstance(images, list) or not all(isinstance(image, dict) for image in images)
    ):
        logger.error("'default_options.images' must be a list of dictionaries.")
        return False

    unknown = sorted(set(defaults) - OPTION_KEYS)
    if unknown:
        # Unknown option keys are ignored by the writer, not fatal.
        logger.warning(f"Ignoring unknown keys in 'default_options': {', '.join(unknown)}")

    logger.info("Configuration validation successful.")
    return True
