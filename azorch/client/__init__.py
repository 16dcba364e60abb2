"""
Azkaban client module for azorch.

This module is the boundary where azorch talks to Azkaban:
- AzkabanClient: protocol every client implements
- AzkabanAjaxClient: httpx client for the Azkaban AJAX API
- InMemoryAzkabanClient: server-less client for dry runs and tests
- classify/CallResult: typed outcome of a client call (success, conflict, failure)
"""

from azorch.client.base import AzkabanClient
from azorch.client.ajax import AzkabanAjaxClient
from azorch.client.memory import InMemoryAzkabanClient, StoredProject
from azorch.client.result import (
    PROJECT_EXISTS_MESSAGE,
    CallResult,
    CallStatus,
    classify,
    is_project_exists,
)

__all__ = [
    "AzkabanClient",
    "AzkabanAjaxClient",
    "InMemoryAzkabanClient",
    "StoredProject",
    "PROJECT_EXISTS_MESSAGE",
    "CallResult",
    "CallStatus",
    "classify",
    "is_project_exists",
]
