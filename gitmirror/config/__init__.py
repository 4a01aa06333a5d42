"""
Configuration — Environment settings and registry validation.
"""

from .settings import Settings
from .validator import RegistryIssue, validate_registry

__all__ = ["RegistryIssue", "Settings", "validate_registry"]
