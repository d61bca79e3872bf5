"""Infrastructure layer: configuration, logging and ELF loading."""

from . import config, logging

__all__ = ["config", "logging"]
