"""Core configuration for the Art Portfolio API."""

from .config import PortfolioConfig, config

__all__ = [
    "PortfolioConfig",
    "config",
]
