"""
Logging configuration for pycondenser with clear module prefixes
"""

import logging


class ModuleLogger:
    """Custom logger that adds module-specific prefixes"""

    # Module prefix mapping
    MODULE_PREFIXES = {
        'pycondenser.connection': '[SOCKET]',
        'pycondenser.packets': '[PACKET]',
        'pycondenser.rcon': '[RCON]',
        'pycondenser.servers.master_server': '[MASTER]',
        'pycondenser.servers': '[SERVER]',
        'pycondenser.models': '[PLAYER]',
        'pycondenser.testing': '[MOCK]',
    }

    @classmethod
    def prefix_for(cls, name: str) -> str:
        """Find the prefix of the most specific matching module"""
        matches = [module for module in cls.MODULE_PREFIXES if name.startswith(module)]
        if not matches:
            return '[PYCONDENSER]'
        return cls.MODULE_PREFIXES[max(matches, key=len)]

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with appropriate prefix for the module"""
        logger = logging.getLogger(name)

        # Don't add handler if already configured
        if logger.handlers:
            return logger

        handler = logging.StreamHandler()
        handler.setFormatter(ModulePrefixFormatter(cls.prefix_for(name)))

        logger.addHandler(handler)
        logger.propagate = False  # Don't propagate to root logger

        return logger


class ModulePrefixFormatter(logging.Formatter):
    """Custom formatter that adds module prefix to log messages"""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(
            fmt='%(asctime)s - %(prefix)s %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def format(self, record):
        record.prefix = self.prefix
        return super().format(record)


def configure_logging(level=logging.INFO):
    """Configure prefixed logging for all pycondenser modules

    ``level`` may be a logging constant or a level name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.getLogger('pycondenser').setLevel(level)
    for module_name in ModuleLogger.MODULE_PREFIXES:
        ModuleLogger.get_logger(module_name).setLevel(level)
