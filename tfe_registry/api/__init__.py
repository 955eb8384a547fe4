"""
Registry API transport: HTTP client, circuit breaker, retry logic.
"""

from __future__ import annotations

from tfe_registry.api.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from tfe_registry.api.client import RegistryAPIClient
from tfe_registry.api.retry import RetryPolicy

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "RegistryAPIClient",
    "RetryPolicy",
]
