"""
Configuration management for Overcontext.

Uses pydantic-settings for environment variable binding.
All settings can be overridden via environment variables with OVERCONTEXT_ prefix.
"""

import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings with environment variable binding."""
    
    model_config = SettingsConfigDict(
        env_prefix="OVERCONTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # ==========================================
    # Discovery
    # ==========================================
    context_dir_name: str = "context"
    """Name of the directory holding context at each level."""
    
    max_levels: int = 10
    """Maximum number of parent directories to walk."""
    
    project_markers: list[str] = [".git", "pyproject.toml", "package.json"]
    """Files or directories marking a project root; discovery stops there."""
    
    # ==========================================
    # Storage
    # ==========================================
    file_extension: Literal[".yaml", ".yml"] = ".yaml"
    """Extension used for newly written entity files."""
    
    default_namespace: str = "_default"
    """Namespace used when none is requested."""
    
    # ==========================================
    # Search
    # ==========================================
    max_search_entities: int = 10000
    """Candidate count above which a search is rejected."""
    
    # ==========================================
    # CLI
    # ==========================================
    default_output_format: Literal["table", "json", "yaml"] = "table"
    
    # ==========================================
    # Logging
    # ==========================================
    log_level: str = "INFO"
    log_file: Path | None = None


# Global settings instance
settings = Settings()


def setup_logging(level: str | None = None) -> None:
    """Configure application logging."""
    log_level = level or settings.log_level
    
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stderr),
    ]
    
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"overcontext.{name}")
