"""
Hydrator Factory

Provides a single entry point for obtaining a hydrator with every
Emojisushi entity registered.

Usage:
    from emojisushi.services.hydrator import get_hydrator

    hydrator = get_hydrator()
    products = hydrator.hydrate(ProductsList, payload)

Each call returns a new hydrator; the client creates one at construction
and keeps it for its lifetime.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from emojisushi.models import ENTITY_TYPES
from emojisushi.services.hydrator.base import (
    BaseHydrator,
    EntityDescriptor,
    FieldDescriptor,
    FieldKind,
)
from emojisushi.services.hydrator.dataclass_hydrator import DataclassHydrator

logger = logging.getLogger(__name__)


def get_hydrator() -> BaseHydrator:
    """
    Create a hydrator with all entity types of emojisushi.models registered.

    Returns:
        BaseHydrator: Ready-to-use hydrator
    """
    hydrator = DataclassHydrator()
    for entity_type in ENTITY_TYPES:
        hydrator.register(entity_type)
    logger.debug(f"Hydrator created with {len(ENTITY_TYPES)} entity types")
    return hydrator


# Export commonly used types and functions
__all__ = [
    "get_hydrator",
    "BaseHydrator",
    "DataclassHydrator",
    "EntityDescriptor",
    "FieldDescriptor",
    "FieldKind",
]
