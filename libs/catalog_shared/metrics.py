# libs/catalog_shared/metrics.py
"""
Simple metrics collection utilities.
"""

from typing import Dict, Optional

from .logging import get_logger

logger = get_logger(__name__)


class Metrics:
    """
    Log-backed metrics.
    Swap the bodies for a real client once one is wired into deployment.
    """

    @staticmethod
    def counter(name: str, labels: Optional[Dict[str, str]] = None):
        """
        Record a counter metric.

        Args:
            name: Metric name
            labels: Optional labels dictionary
        """
        labels_str = ", ".join(f"{k}={v}" for k, v in (labels or {}).items())
        logger.debug(f"METRIC: counter {name} {labels_str}")

    @staticmethod
    def histogram(name: str, value: float, labels: Optional[Dict[str, str]] = None):
        """
        Record a histogram metric.

        Args:
            name: Metric name
            value: Metric value
            labels: Optional labels dictionary
        """
        labels_str = ", ".join(f"{k}={v}" for k, v in (labels or {}).items())
        logger.debug(f"METRIC: histogram {name}={value} {labels_str}")
