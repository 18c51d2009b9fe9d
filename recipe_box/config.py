"""Configuration and user identity management for Recipe Box."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "recipe-box"
CONFIG_DIR = Path(os.getenv("RECIPE_BOX_HOME", Path.home() / f".{APP_NAME}"))
DB_FILE = CONFIG_DIR / "recipe_box.db"
USER_FILE = CONFIG_DIR / "user.json"

# Ensure config directory exists
CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def get_db_path() -> Path:
    """Get the path to the SQLite database (RECIPE_BOX_DB overrides the default)."""
    override = os.getenv("RECIPE_BOX_DB")
    if override:
        return Path(override)
    return DB_FILE


def get_user_id() -> str | None:
    """Get the current user id from environment or config file."""
    user_id = os.getenv("RECIPE_BOX_USER_ID")
    if user_id:
        return user_id

    if USER_FILE.exists():
        try:
            with open(USER_FILE) as f:
                return json.load(f).get("user_id")
        except (OSError, json.JSONDecodeError):
            pass

    return None


def save_user_id(user_id: str) -> None:
    """Save the current user id to the config file."""
    USER_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(USER_FILE, "w") as f:
        json.dump({"user_id": user_id}, f)


def clear_user_id() -> None:
    """Forget the saved user id."""
    if USER_FILE.exists():
        USER_FILE.unlink()
