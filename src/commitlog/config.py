"""Configuration loading and validation for commitlog."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from commitlog.models import GitUser

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".commitlog"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"


@dataclass
class UserConfig:
    """Identity used to recognise the querying user's own commits.

    When both fields are unset, the identity is read from git's
    ``user.name`` and ``user.email`` instead.
    """

    name: str | None = None
    email: str | None = None

    def is_set(self) -> bool:
        return self.name is not None or self.email is not None

    def to_git_user(self) -> GitUser:
        return GitUser(name=self.name, email=self.email)


@dataclass
class Config:
    """Application configuration."""

    git_path: str = "git"
    default_limit: int = 200
    you_label: str = "You"
    follow_renames: bool = True
    user: UserConfig = field(default_factory=UserConfig)


def load_config(path: Path | None = None) -> Config:
    """Load configuration from a JSON file, falling back to defaults.

    Args:
        path: Path to config file. Defaults to ~/.commitlog/config.json.

    Returns:
        Loaded Config instance.
    """
    config_path = path or DEFAULT_CONFIG_PATH

    if config_path.exists():
        logger.info("Loading config from %s", config_path)
        with open(config_path) as f:
            data = json.load(f)
    else:
        logger.debug("No config file found at %s, using defaults", config_path)
        data = {}

    user_data = data.get("user", {})
    user = UserConfig(
        name=user_data.get("name"),
        email=user_data.get("email"),
    )

    default_limit = data.get("default_limit", 200)
    if not isinstance(default_limit, int) or default_limit < 0:
        logger.warning(
            "Invalid default_limit %r in %s, using 200", default_limit, config_path
        )
        default_limit = 200

    return Config(
        git_path=data.get("git_path", "git"),
        default_limit=default_limit,
        you_label=data.get("you_label", "You"),
        follow_renames=bool(data.get("follow_renames", True)),
        user=user,
    )


def save_config(config: Config, path: Path | None = None) -> None:
    """Save configuration to a JSON file, preserving unknown keys.

    Reads the existing file first (if present) so that keys not managed
    by this application are kept intact.

    Args:
        config: The Config instance to persist.
        path: Path to config file. Defaults to ~/.commitlog/config.json.
    """
    config_path = path or DEFAULT_CONFIG_PATH

    # Read existing data to preserve unknown keys
    existing: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            existing = json.load(f)

    existing["git_path"] = config.git_path
    existing["default_limit"] = config.default_limit
    existing["you_label"] = config.you_label
    existing["follow_renames"] = config.follow_renames
    existing["user"] = {
        "name": config.user.name,
        "email": config.user.email,
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(existing, f, indent=2)
        f.write("\n")

    logger.info("Saved config to %s", config_path)
