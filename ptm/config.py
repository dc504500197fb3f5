"""Environment-based configuration for Planning Tree Manager."""

from __future__ import annotations

import logging
import os


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """Settings read from ``PTM_*`` environment variables."""

    WORKSPACE_FILE: str = os.getenv("PTM_WORKSPACE_FILE", "ptm.yaml")
    DEBUG: bool = _flag("PTM_DEBUG")
    LOG_LEVEL: str = os.getenv("PTM_LOG_LEVEL", "WARNING").upper()
    DEFAULT_TEMPLATE: str = os.getenv("PTM_DEFAULT_TEMPLATE", "saas")

    @classmethod
    def reload(cls) -> None:
        """Re-read the environment (used after changing variables at runtime)."""
        cls.WORKSPACE_FILE = os.getenv("PTM_WORKSPACE_FILE", "ptm.yaml")
        cls.DEBUG = _flag("PTM_DEBUG")
        cls.LOG_LEVEL = os.getenv("PTM_LOG_LEVEL", "WARNING").upper()
        cls.DEFAULT_TEMPLATE = os.getenv("PTM_DEFAULT_TEMPLATE", "saas")

    @classmethod
    def log_level(cls) -> int:
        if cls.DEBUG:
            return logging.DEBUG
        level = logging.getLevelName(cls.LOG_LEVEL)
        return level if isinstance(level, int) else logging.WARNING

    @classmethod
    def display(cls) -> str:
        return (
            "Planning Tree Manager configuration\n"
            f"  workspace file:   {cls.WORKSPACE_FILE}\n"
            f"  debug:            {cls.DEBUG}\n"
            f"  log level:        {logging.getLevelName(cls.log_level())}\n"
            f"  default template: {cls.DEFAULT_TEMPLATE}"
        )


__all__ = ["Config"]
