"""
Configuration validation utilities
"""

from typing import Optional, Tuple

from ..protocol.constants import Region


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


def validate_host(host: str) -> str:
    """Validate host address"""
    if not host or not isinstance(host, str):
        raise ConfigValidationError("Host must be a non-empty string")

    if len(host.strip()) == 0:
        raise ConfigValidationError("Host cannot be empty or whitespace")

    return host.strip()


def validate_port(port: int) -> int:
    """Validate port number"""
    if not isinstance(port, int) or isinstance(port, bool):
        raise ConfigValidationError("Port must be an integer")

    if port < 1 or port > 65535:
        raise ConfigValidationError("Port must be between 1 and 65535")

    return port


def validate_timeout(timeout: int) -> int:
    """Validate a timeout in milliseconds"""
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
        raise ConfigValidationError("Timeout must be a number")

    if timeout <= 0:
        raise ConfigValidationError("Timeout must be greater than 0")

    return int(timeout)


def validate_retries(retries: int) -> int:
    """Validate a retry count"""
    if not isinstance(retries, int) or isinstance(retries, bool):
        raise ConfigValidationError("Retries must be an integer")

    if retries < 1:
        raise ConfigValidationError("Retries must be at least 1")

    return retries


def validate_max_batches(max_batches: Optional[int]) -> Optional[int]:
    """Validate the master server batch ceiling (None disables it)"""
    if max_batches is None:
        return None

    if not isinstance(max_batches, int) or isinstance(max_batches, bool):
        raise ConfigValidationError("Batch limit must be an integer or None")

    if max_batches < 1:
        raise ConfigValidationError("Batch limit must be at least 1")

    return max_batches


def validate_buffer_size(size: int) -> int:
    """Validate a receive buffer size"""
    if not isinstance(size, int) or isinstance(size, bool):
        raise ConfigValidationError("Buffer size must be an integer")

    if size < 1 or size > 65535:
        raise ConfigValidationError("Buffer size must be between 1 and 65535")

    return size


def validate_log_level(level: str) -> str:
    """Validate a logging level name"""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    if not isinstance(level, str) or level.upper() not in valid_levels:
        raise ConfigValidationError(f"Log level must be one of: {', '.join(valid_levels)}")

    return level.upper()


def validate_region(region: int) -> int:
    """Validate a master server region code"""
    if not isinstance(region, int) or isinstance(region, bool):
        raise ConfigValidationError(f"Region must be an integer region code, got {region!r}")

    if region not in Region.values():
        raise ConfigValidationError(f"Unknown master server region 0x{region:02X}")

    return region


def validate_address(address: str, default_port: Optional[int] = None) -> Tuple[str, int]:
    """Split a ``host[:port]`` string into a validated host and port"""
    host = validate_host(address)
    port = default_port

    if ':' in host:
        host, _, port_text = host.rpartition(':')
        host = validate_host(host)
        if not port_text.isdigit():
            raise ConfigValidationError(f"Invalid port in address {address!r}")
        port = int(port_text)

    if port is None:
        raise ConfigValidationError(f"No port given for {address!r}")

    return host, validate_port(port)
