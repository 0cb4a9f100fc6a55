"""Configuration package for the portfolio pricing service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
