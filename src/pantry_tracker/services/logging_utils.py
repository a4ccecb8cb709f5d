"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across the purchase ledger and the
repositories.

Usage:
    from pantry_tracker.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="record_purchase_line",
        outcome="success",
        collection_id=3,
        item_id=12,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'pantry_tracker.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'pantry_tracker.services.purchase_ledger'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"pantry_tracker.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "record_purchase_line", "delete_category")
        outcome: Outcome description (e.g., "success", "refused", "error")
        level: Log level (default: INFO)
        **context: Additional context fields (entity IDs, error details, etc.)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
