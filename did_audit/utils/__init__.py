"""
DID-Audit Utilities Module

Helper functions for displaying hashes and proof geometry.
"""

from did_audit.utils.helpers import (
    format_operation_type,
    truncate_hash,
    get_sibling_position,
    calculate_batch_size,
)

__all__ = [
    "format_operation_type",
    "truncate_hash",
    "get_sibling_position",
    "calculate_batch_size",
]
