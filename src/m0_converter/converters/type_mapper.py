"""
Type Mapper - rdfs:range to declared range variant mapping.

Each metadata attribute predicate of the report structure declares an
rdfs:range in the MSD. This module reduces that range to the closed set
of ``DeclaredRange`` variants the report converter dispatches on.
"""

import logging
from typing import Dict, Optional, Union

from rdflib import XSD, URIRef

from ..constants import DQV_METRIC, DQV_QUALITY_MEASUREMENT, SIMS_REPORTED_ATTRIBUTE
from ..shared.models import DeclaredRange

logger = logging.getLogger(__name__)

# Range URI to declared range; anything else is a coded reference
RANGE_TO_DECLARED_RANGE: Dict[str, DeclaredRange] = {
    str(SIMS_REPORTED_ATTRIBUTE): DeclaredRange.REPORTED_ATTRIBUTE,
    str(XSD.string): DeclaredRange.PLAIN_STRING,
    str(XSD.date): DeclaredRange.DATE,
    str(DQV_QUALITY_MEASUREMENT): DeclaredRange.QUALITY_MEASUREMENT,
    str(DQV_METRIC): DeclaredRange.QUALITY_MEASUREMENT,
}


class TypeMapper:
    """
    Maps declared rdfs:range URIs to ``DeclaredRange`` variants.

    Example:
        >>> TypeMapper.get_declared_range(XSD.date)
        <DeclaredRange.DATE: 'date'>
        >>> TypeMapper.get_declared_range(None)
        <DeclaredRange.NONE: 'none'>
    """

    @staticmethod
    def get_declared_range(range_uri: Optional[Union[str, URIRef]]) -> DeclaredRange:
        """
        Map a range URI to its variant.

        Args:
            range_uri: The rdfs:range object, or None when the predicate
                declares no range (free text with references).

        Returns:
            The declared range; unknown URIs are coded references, whose
            validity is checked at conversion time.
        """
        if range_uri is None:
            return DeclaredRange.NONE
        return RANGE_TO_DECLARED_RANGE.get(str(range_uri), DeclaredRange.CODED_REFERENCE)
