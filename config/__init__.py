"""
Configuration package.

This package contains the centralized environment manager for the server
and the Azure DevOps plugin.
"""

from config.manager import EnvironmentManager, env_manager
from config.types import AzureDevOpsSettings

# Re-export the singleton instance for easy access
env = env_manager

__all__ = [
    "EnvironmentManager",
    "env_manager",
    "env",
    "AzureDevOpsSettings",
]
