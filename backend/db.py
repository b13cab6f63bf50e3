import json
import logging
import os

from config import STATE_DIR

logger = logging.getLogger(__name__)

CHAT_DIRECTORY_FILE = "telegram_chats.json"


def token_path(vendor: str, state_dir: str = STATE_DIR) -> str:
    return os.path.join(state_dir, f"{vendor}_tokens.json")


def read_json(path: str, default=None):
    """Load a JSON file, returning `default` when it is missing or unreadable."""
    if not os.path.exists(path):
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return default


def write_json(path: str, data) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


# ============================ TOKENS ============================

def load_tokens(vendor: str, state_dir: str = STATE_DIR):
    return read_json(token_path(vendor, state_dir))


def save_tokens(vendor: str, tokens: dict, state_dir: str = STATE_DIR) -> None:
    write_json(token_path(vendor, state_dir), tokens)
    logger.info("Saved %s tokens", vendor)


# ============================ CHAT DIRECTORY ============================

def load_chat_directory(state_dir: str = STATE_DIR) -> dict:
    return read_json(os.path.join(state_dir, CHAT_DIRECTORY_FILE), default={}) or {}


def save_chat_directory(chats: dict, state_dir: str = STATE_DIR) -> None:
    write_json(os.path.join(state_dir, CHAT_DIRECTORY_FILE), chats)
