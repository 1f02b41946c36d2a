"""
Testing infrastructure for pycondenser
"""

from .fakes import ScriptedSocket, script_datagrams
from .mock_server import MockSourceServer, ServerScenario

__all__ = [
    'MockSourceServer', 'ServerScenario',
    'ScriptedSocket', 'script_datagrams',
]
