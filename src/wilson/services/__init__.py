"""Registry of the services managed by Wilson.

Key Components:
    - ServiceDescriptor: Static description of one service
    - ServiceRegistry: Ordered, immutable collection of descriptors
    - default_registry: Builds the default engram/synapse/cortex/wilson set
    - log_sources: Valid source names for the ``logs`` command
"""

from ._models import ServiceDescriptor
from ._registry import (
    SUPERVISOR_LOG_SOURCE,
    ServiceRegistry,
    default_registry,
    log_sources,
)

__all__ = [
    "SUPERVISOR_LOG_SOURCE",
    "ServiceDescriptor",
    "ServiceRegistry",
    "default_registry",
    "log_sources",
]
