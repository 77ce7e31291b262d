"""
Shared utilities for the catalog storefront project.

This package provides logging, configuration, error helpers, middleware,
and response models used by the catalog service.
"""

# Configuration
from .config import BaseServiceConfig

# Context helpers
from .context import AppContext

# Error helpers
from .errors import (
    not_found_error,
    service_error,
    unauthorized_error,
    validation_error,
)

# Health check
from .health import format_health_response

# Logging
from .logging import get_logger

# Metrics
from .metrics import Metrics

# Middleware
from .middleware import CorrelationIdMiddleware, MetricsMiddleware

# Models
from .models import ErrorResponse, HealthResponse, HealthStatus, SuccessResponse

__all__ = [
    # Configuration
    "BaseServiceConfig",
    # Context
    "AppContext",
    # Errors
    "validation_error",
    "not_found_error",
    "service_error",
    "unauthorized_error",
    # Health
    "format_health_response",
    # Logging
    "get_logger",
    # Middleware
    "CorrelationIdMiddleware",
    "MetricsMiddleware",
    # Metrics
    "Metrics",
    # Models
    "ErrorResponse",
    "HealthResponse",
    "HealthStatus",
    "SuccessResponse",
]
