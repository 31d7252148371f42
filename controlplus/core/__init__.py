"""Core: config, lifespan, exception handlers, rate limits."""

from controlplus.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
