"""
Configuration system for pycondenser
"""

from .client_config import ClientConfig
from .validation import ConfigValidationError

__all__ = ['ClientConfig', 'ConfigValidationError']
