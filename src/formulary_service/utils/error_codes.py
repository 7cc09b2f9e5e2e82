# ABOUTME: Defines canonical error codes for formulary operations.
# ABOUTME: Keeps the error taxonomy consistent across services, API and CLI.
"""Centralized error codes used across the formulary service."""


class ErrorCode:
    """String constants describing known failure situations."""

    NOT_FOUND = "not_found"
    PARTIAL_BATCH_FAILURE = "partial_batch_failure"
    STORE_UNAVAILABLE = "store_unavailable"
