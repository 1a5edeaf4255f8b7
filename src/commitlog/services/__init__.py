"""Service layer for commitlog.

Wraps git invocation, parsing and configuration for use by the CLI.
"""

from commitlog.services.config_service import ConfigService
from commitlog.services.log_service import LogService

__all__ = ["ConfigService", "LogService"]
