"""
Simulated API Server
Prints a startup banner, then a fixed request line at a constant cadence
chosen once at startup.
"""

from api_server.config import ServerConfig, load_config
from api_server.random_source import RandomSource
from api_server.server_loop import LoopState, LoopStatus, ServerLoop

__version__ = "0.1.0"

__all__ = [
    "LoopState",
    "LoopStatus",
    "RandomSource",
    "ServerConfig",
    "ServerLoop",
    "load_config",
]
