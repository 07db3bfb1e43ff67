"""
Configuration
"""
from .settings import Config, DevelopmentConfig, ProductionConfig, get_config
from .policies import load_policy

__all__ = [
    "Config",
    "DevelopmentConfig",
    "ProductionConfig",
    "get_config",
    "load_policy",
]
