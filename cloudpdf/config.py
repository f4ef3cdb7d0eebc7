"""Configuration management for the CloudPDF page tools service."""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PageToolsConfig:
    """Configuration for page operations."""
    max_file_size_mb: int = field(
        default_factory=lambda: int(os.environ.get("MAX_FILE_SIZE_MB", "100"))
    )
    default_font_size: float = field(
        default_factory=lambda: float(os.environ.get("DEFAULT_FONT_SIZE", "12"))
    )
    default_text_color: str = field(
        default_factory=lambda: os.environ.get("DEFAULT_TEXT_COLOR", "#0000FF")
    )


@dataclass
class StorageConfig:
    """Configuration for blob storage."""
    root: str = field(
        default_factory=lambda: os.environ.get("STORAGE_ROOT", "./storage")
    )
    upload_chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("UPLOAD_CHUNK_SIZE", "65536"))
    )


@dataclass
class ServerConfig:
    """Configuration for HTTP server."""
    host: str = field(
        default_factory=lambda: os.environ.get("HTTP_HOST", "0.0.0.0")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("HTTP_PORT", "8089"))
    )


@dataclass
class Config:
    """Main configuration container."""
    page_tools: PageToolsConfig = field(default_factory=PageToolsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration from environment."""
    global _config
    _config = Config()
    return _config
