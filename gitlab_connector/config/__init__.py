"""Configuration module for the GitLab connector."""
from .settings import GitlabConfiguration, load_settings

__all__ = ["GitlabConfiguration", "load_settings"]
