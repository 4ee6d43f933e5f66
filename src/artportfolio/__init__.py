"""Art Portfolio API - artwork catalog with image uploads."""

__version__ = "0.1.0"

from artportfolio.core.config import PortfolioConfig, config

__all__ = [
    "PortfolioConfig",
    "config",
]
