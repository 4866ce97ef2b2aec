"""Configuration module for container_manager.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- CLILocator: Finds the container CLI executable
- Settings: Environment variable configuration
"""

from container_manager.config.locator import CLILocator
from container_manager.config.main import Config
from container_manager.config.settings import Settings

__all__ = ["CLILocator", "Config", "Settings"]
