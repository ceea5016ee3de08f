"""
ID Generator - Stable target identifiers for operation-like resources.

Families, series, operations and indicators of the M0 model receive
target URIs built from a numeric identifier. Some resources have a fixed
(legacy) identifier; all others draw the smallest free number of a pool
shared by every type, in a fixed type order, so that the mapping is the
same on every run over the same snapshot.

Usage:
    from m0_converter.common.id_generator import IdentifierAllocator

    allocator = IdentifierAllocator(config.target_uri)
    mapping = allocator.allocate(fixed, max_ids, reserved, store.exists)
    mapping.get(EntityType.SERIES, 12)  # "http://id.insee.fr/operations/serie/s1001"
"""

import logging
from collections import deque
from types import MappingProxyType
from typing import Callable, Deque, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

from ..shared.models import EntityType

logger = logging.getLogger(__name__)

DEFAULT_POOL_START = 1001
DEFAULT_POOL_END = 1999

# Processing order is part of the contract: changing it changes the mapping
DEFAULT_TYPE_ORDER: Tuple[EntityType, ...] = (
    EntityType.FAMILY,
    EntityType.SERIES,
    EntityType.OPERATION,
    EntityType.INDICATOR,
)

URIBuilder = Callable[[Union[int, str], EntityType], str]
SourceKey = Tuple[EntityType, int]


class PoolExhaustedError(Exception):
    """Raised when the shared pool runs out of identifiers."""

    def __init__(self, entity_type: EntityType, needed: int, remaining: int):
        self.entity_type = entity_type
        self.needed = needed
        self.remaining = remaining
        super().__init__(
            f"Identifier pool exhausted while processing type '{entity_type}': "
            f"{needed} identifier(s) needed, {remaining} remaining. "
            f"Enlarge the pool range or lower the reserved counts."
        )


class MappingConflictError(Exception):
    """Raised when two source resources would share one target URI."""

    def __init__(self, target_uri: str, first: SourceKey, second: SourceKey):
        self.target_uri = target_uri
        self.first = first
        self.second = second
        super().__init__(
            f"Target URI {target_uri} assigned to both {first[0]} {first[1]} "
            f"and {second[0]} {second[1]}"
        )


class TargetURIMapping:
    """
    Immutable mapping from (entity type, M0 number) to target URI.

    Example:
        >>> mapping.get(EntityType.OPERATION, 7)
        'http://id.insee.fr/operations/operation/s1002'
        >>> (EntityType.OPERATION, 999) in mapping
        False
    """

    def __init__(self, mappings: Mapping[SourceKey, str]):
        self._mappings = MappingProxyType(dict(mappings))

    def get(self, entity_type: EntityType, number: int) -> Optional[str]:
        return self._mappings.get((entity_type, number))

    def __contains__(self, key: object) -> bool:
        return key in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[SourceKey]:
        return iter(sorted(self._mappings, key=lambda key: (key[0].value, key[1])))

    def items(self) -> Iterable[Tuple[SourceKey, str]]:
        return [(key, self._mappings[key]) for key in self]

    def to_dict(self, uri_of: Callable[[EntityType, int], str]) -> Dict[str, str]:
        """Serialize as M0 URI -> target URI, sorted by M0 URI."""
        return dict(sorted((uri_of(kind, number), uri) for (kind, number), uri in self.items()))


def target_number(target_uri: str) -> Optional[int]:
    """
    Numeric identifier carried by a target URI.

    The last path segment is a one-letter prefix followed by the number
    ('s1241', 'p1003').
    """
    segment = target_uri.rstrip("/").rsplit("/", 1)[-1]
    digits = segment[1:]
    return int(digits) if digits.isdigit() else None


class IdentifierAllocator:
    """
    Deterministic allocation of target identifiers.

    One ascending pool [pool_start, pool_end] is shared by all types
    except the exempt ones, which reuse their M0 number as target number.
    The pool only lives for the duration of one ``allocate`` call.

    Example:
        >>> allocator = IdentifierAllocator(config.target_uri, 1001, 1999)
        >>> mapping = allocator.allocate(
        ...     fixed_mappings={EntityType.OPERATION: {12: "http://.../operation/s1010"}},
        ...     max_ids={EntityType.OPERATION: 20},
        ...     reserved_counts={EntityType.OPERATION: 5},
        ...     exists=store.exists,
        ... )
    """

    def __init__(
        self,
        uri_builder: URIBuilder,
        pool_start: int = DEFAULT_POOL_START,
        pool_end: int = DEFAULT_POOL_END,
        exempt_types: Iterable[EntityType] = (EntityType.FAMILY,),
        type_order: Sequence[EntityType] = DEFAULT_TYPE_ORDER,
    ):
        """
        Initialize the allocator.

        Args:
            uri_builder: Builds a target URI from (number, entity type).
            pool_start: First number of the shared pool.
            pool_end: Last number of the shared pool (inclusive).
            exempt_types: Types that do not draw from the pool.
            type_order: Fixed processing order of the types.
        """
        if pool_end < pool_start:
            raise ValueError("pool_end must be >= pool_start")
        self._uri_builder = uri_builder
        self._pool_start = pool_start
        self._pool_end = pool_end
        self._exempt_types = frozenset(exempt_types)
        self._type_order = tuple(type_order)

    def allocate(
        self,
        fixed_mappings: Mapping[EntityType, Mapping[int, str]],
        max_ids: Mapping[EntityType, int],
        reserved_counts: Optional[Mapping[EntityType, int]] = None,
        exists: Callable[[EntityType, int], bool] = lambda entity_type, number: True,
    ) -> TargetURIMapping:
        """
        Build the complete mapping.

        Args:
            fixed_mappings: Per type, M0 number -> fixed target URI.
            max_ids: Per type, highest M0 number to consider.
            reserved_counts: Per type, pool numbers withheld after its pass.
            exists: Tells whether an M0 resource actually exists.

        Returns:
            The immutable mapping.

        Raises:
            PoolExhaustedError: If the pool runs out during allocation or reservation.
            MappingConflictError: If two fixed mappings share a target URI.
        """
        reserved_counts = reserved_counts or {}
        mappings: Dict[SourceKey, str] = {}
        owners: Dict[str, SourceKey] = {}

        # 1: fixed mappings, removing their numbers from the shared pool
        claimed = set()
        for entity_type in self._type_order:
            type_fixed = fixed_mappings.get(entity_type, {})
            if not type_fixed:
                logger.info(f"No fixed mappings for type {entity_type}")
                continue
            logger.info(f"Number of fixed mappings for type {entity_type}: {len(type_fixed)}")
            for number in sorted(type_fixed):
                uri = type_fixed[number]
                self._register(mappings, owners, (entity_type, number), uri)
                fixed_number = target_number(uri)
                if fixed_number is None:
                    logger.warning(f"No numeric identifier in fixed target URI {uri}")
                else:
                    claimed.add(fixed_number)

        pool: Deque[int] = deque(
            n for n in range(self._pool_start, self._pool_end + 1) if n not in claimed
        )
        logger.info(f"Total number of fixed mappings: {len(mappings)}, pool size: {len(pool)}")

        # 2: sequential allocation, then reservation, type by type
        for entity_type in self._type_order:
            created = 0
            for number in range(1, max_ids.get(entity_type, 0) + 1):
                if (entity_type, number) in mappings:
                    continue
                if not exists(entity_type, number):
                    continue
                if entity_type in self._exempt_types:
                    target = number
                else:
                    if not pool:
                        raise PoolExhaustedError(entity_type, 1, 0)
                    target = pool.popleft()
                self._register(mappings, owners, (entity_type, number), self._uri_builder(target, entity_type))
                created += 1
            logger.info(f"Number of new mappings created for type {entity_type}: {created}")

            to_reserve = reserved_counts.get(entity_type, 0)
            if to_reserve > 0:
                if to_reserve > len(pool):
                    raise PoolExhaustedError(entity_type, to_reserve, len(pool))
                logger.debug(f"Reserving {to_reserve} identifiers for future instances of type {entity_type}")
                for _ in range(to_reserve):
                    pool.popleft()
            logger.info(f"Total number of remaining identifiers for new mappings: {len(pool)}")

        logger.info(f"Total number of mappings: {len(mappings)}")
        return TargetURIMapping(mappings)

    @staticmethod
    def _register(
        mappings: Dict[SourceKey, str],
        owners: Dict[str, SourceKey],
        key: SourceKey,
        uri: str,
    ) -> None:
        if uri in owners and owners[uri] != key:
            raise MappingConflictError(uri, owners[uri], key)
        owners[uri] = key
        mappings[key] = uri
