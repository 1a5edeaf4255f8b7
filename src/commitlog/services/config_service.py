"""Configuration service for commitlog.

Provides a high-level interface for loading, saving, and updating configuration.
"""

import logging
from pathlib import Path

from commitlog.config import Config, UserConfig, load_config, save_config

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for managing application configuration."""

    def load(self, path: Path | None = None) -> Config:
        """Load configuration from disk.

        Args:
            path: Optional config file path. Defaults to ~/.commitlog/config.json.

        Returns:
            Loaded Config instance.
        """
        return load_config(path)

    def save(self, config: Config, path: Path | None = None) -> None:
        """Save configuration to disk, preserving unknown keys.

        Args:
            config: Config instance to save.
            path: Optional config file path.
        """
        save_config(config, path)

    def set_user(
        self,
        name: str | None,
        email: str | None,
        path: Path | None = None,
    ) -> Config:
        """Store the identity whose commits are shown as the you-label.

        Passing neither name nor email clears the identity, so git's
        ``user.name`` and ``user.email`` are used again.

        Args:
            name: Author name to match.
            email: Author email to match.
            path: Optional config file path.

        Returns:
            The updated Config.
        """
        config = load_config(path)
        config.user = UserConfig(name=name, email=email)
        save_config(config, path)
        logger.info("User identity set to %s <%s>", name, email)
        return config
