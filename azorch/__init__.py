"""
azorch - Azkaban spec deployment adapter

Mirrors the lifecycle of job specs onto an Azkaban server: each JobSpec
becomes a project with an uploaded flow and a cron schedule.
"""

__version__ = "0.1.0"


__all__ = [
    "AzorchConfig",
    "load_config",
    "get_azorch_home",
    "AzkabanSpecProducer",
    "JobSpec",
]

from .config import AzorchConfig, load_config, get_azorch_home
from .producer import AzkabanSpecProducer
from .schemas import JobSpec
