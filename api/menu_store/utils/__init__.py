"""
Utility helpers.

Provides:
- Circuit breaker for store connections
"""

from .circuit_breaker import CircuitBreaker, CircuitState

__all__ = [
    "CircuitBreaker",
    "CircuitState"
]
