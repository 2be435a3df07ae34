from .env import load_carrier_credentials, load_env
from .carriers import load_carrier_config, load_carrier_configs
from .logging_config import get_logger

__all__ = [
    "get_logger",
    "load_carrier_config",
    "load_carrier_configs",
    "load_carrier_credentials",
    "load_env",
]
