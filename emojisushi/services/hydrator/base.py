"""
Hydrator Abstract Base Class

Defines the interface contract for turning decoded JSON into typed
entity instances and back.

A hydrator keeps one EntityDescriptor per registered entity type: the
table of field names, field kinds and nested entity references that
drives the generic recursive hydration. Descriptors are built once at
registration; hydrated instances are never cached.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Type, TypeVar

T = TypeVar("T")


class FieldKind(str, Enum):
    """
    How a declared field is filled from raw JSON.

    Attributes:
        PRIMITIVE: str / int / float / bool, coerced from the raw value
        ENTITY: another registered entity, hydrated recursively
        ENTITY_LIST: list of a registered entity, hydrated element-wise
        SCALAR_LIST: list of plain JSON values, copied
        MAPPING: plain JSON object, copied
        ANY: raw value passed through untouched
    """
    PRIMITIVE = "primitive"
    ENTITY = "entity"
    ENTITY_LIST = "entity_list"
    SCALAR_LIST = "scalar_list"
    MAPPING = "mapping"
    ANY = "any"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Hydration rule for one field.

    Attributes:
        name: Field name, also the JSON key
        kind: How the raw value is converted
        python_type: Primitive type for PRIMITIVE fields, else the container type
        nested: Entity type for ENTITY / ENTITY_LIST fields
        optional: Missing or null raw values become None
    """
    name: str
    kind: FieldKind
    python_type: Any = None
    nested: Optional[type] = None
    optional: bool = False

    @property
    def default(self) -> Any:
        """Value used when a non-optional field is missing or mismatched."""
        if self.kind == FieldKind.PRIMITIVE:
            return self.python_type()
        if self.kind in (FieldKind.ENTITY_LIST, FieldKind.SCALAR_LIST):
            return []
        if self.kind == FieldKind.MAPPING:
            return {}
        return None


@dataclass(frozen=True)
class EntityDescriptor:
    """Field table of one registered entity type."""
    entity_type: type
    fields: Tuple[FieldDescriptor, ...]

    @property
    def name(self) -> str:
        return self.entity_type.__name__


class BaseHydrator(ABC):
    """
    Abstract base class for hydrators.

    Example:
        >>> hydrator = get_hydrator()
        >>> city = hydrator.hydrate(City, {"id": 5, "slug": "odesa"})
        >>> city.name
        ''
        >>> hydrator.extract(city)["slug"]
        'odesa'
    """

    @abstractmethod
    def register(self, entity_type: type) -> EntityDescriptor:
        """
        Register an entity type (and the entity types it references).

        Args:
            entity_type: Entity class to describe

        Returns:
            EntityDescriptor: The field table built for the type
        """
        pass

    @abstractmethod
    def is_registered(self, entity_type: type) -> bool:
        """Check whether an entity type can be hydrated."""
        pass

    @abstractmethod
    def hydrate(self, target_type: Type[T], raw: Any) -> T:
        """
        Build a typed instance from decoded JSON.

        Args:
            target_type: Registered entity type
            raw: Decoded JSON object

        Returns:
            A fresh instance of target_type

        Raises:
            HydrationError: If target_type is not registered or raw does
                not have the shape of an object
        """
        pass

    @abstractmethod
    def extract(self, instance: Any) -> dict:
        """
        Convert a hydrated instance back to plain dicts, lists and scalars.

        Raises:
            HydrationError: If the instance's type is not registered
        """
        pass
