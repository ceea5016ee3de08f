"""Common utilities shared across the converter."""

from .id_generator import (
    IdentifierAllocator,
    TargetURIMapping,
    PoolExhaustedError,
    MappingConflictError,
    target_number,
    DEFAULT_TYPE_ORDER,
)

__all__ = [
    'IdentifierAllocator',
    'TargetURIMapping',
    'PoolExhaustedError',
    'MappingConflictError',
    'target_number',
    'DEFAULT_TYPE_ORDER',
]
