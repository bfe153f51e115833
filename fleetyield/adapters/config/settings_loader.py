import os

import yaml

from fleetyield.config.schema import AppConfig


def load_config(path: str | None = None) -> AppConfig:
    """
    Load application configuration from a YAML file.
    Explicit environment variables take precedence over the file.

    Args:
        path: Path to config.yaml. Defaults to FY_CONFIG_FILE env var or "config.yaml".
    """
    if path is None:
        path = os.getenv("FY_CONFIG_FILE", "config.yaml")

    config_data = {}

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RuntimeError(f"Failed to load configuration from {path}: {e}")

    # Env vars > File > Defaults
    if os.getenv("MONGO_URL"):
        config_data.setdefault("mongo", {})["url"] = os.getenv("MONGO_URL")

    if os.getenv("MONGO_DB_NAME"):
        config_data.setdefault("mongo", {})["db_name"] = os.getenv("MONGO_DB_NAME")

    if os.getenv("KAFKA_BOOTSTRAP_SERVERS"):
        kafka = config_data.setdefault("kafka", {})
        kafka["bootstrap_servers"] = os.getenv("KAFKA_BOOTSTRAP_SERVERS")
        kafka["enabled"] = True

    if os.getenv("FY_SETTINGS_FILE"):
        config_data["settings_file"] = os.getenv("FY_SETTINGS_FILE")

    if os.getenv("FY_LOG_LEVEL"):
        config_data["log_level"] = os.getenv("FY_LOG_LEVEL")

    return AppConfig(**config_data)
