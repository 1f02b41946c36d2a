"""
Client Configuration - timeouts, retries and buffer sizes
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .validation import (
    validate_buffer_size, validate_log_level, validate_max_batches,
    validate_retries, validate_timeout,
)


@dataclass
class ClientConfig:
    """Client configuration settings"""

    # Socket settings (milliseconds)
    socket_timeout: int = 1000
    connect_timeout: int = 1000

    # Master server enumeration
    master_retries: int = 3
    master_max_batches: Optional[int] = 10000

    # Advanced
    query_buffer_size: int = 1400

    # Logging (None leaves the logging setup alone)
    log_level: Optional[str] = None
    log_packets: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'socket_timeout': self.socket_timeout,
            'connect_timeout': self.connect_timeout,
            'master_retries': self.master_retries,
            'master_max_batches': self.master_max_batches,
            'query_buffer_size': self.query_buffer_size,
            'log_level': self.log_level,
            'log_packets': self.log_packets,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientConfig':
        """Create from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def update(self, **kwargs):
        """Update configuration values"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def validate(self) -> 'ClientConfig':
        """Check all values, raising ConfigValidationError on the first bad one"""
        validate_timeout(self.socket_timeout)
        validate_timeout(self.connect_timeout)
        validate_retries(self.master_retries)
        validate_max_batches(self.master_max_batches)
        validate_buffer_size(self.query_buffer_size)
        if self.log_level is not None:
            validate_log_level(self.log_level)
        return self
