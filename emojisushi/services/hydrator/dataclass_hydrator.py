"""
Dataclass Hydrator Implementation

Hydrates frozen dataclasses from decoded JSON using field descriptors
derived from their type annotations.

Rules:
    - Primitives are coerced ("5" -> 5 for int fields); missing or
      non-coercible values fall back to the type default ("" / 0 / False)
    - Optional[X] fields become None when the raw value is missing or null
    - Nested entities are hydrated recursively; List[Entity] fields are
      hydrated element-wise and default to []
    - An empty array where an object is expected counts as missing
      (PHP's json_encode writes empty objects as [])
    - Unknown raw keys are ignored

Author: Khalil Bannouri
Version: 1.0.0
"""

import copy
import dataclasses
import logging
import types
from collections.abc import Mapping
from typing import Any, Dict, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from emojisushi.core.exceptions import HydrationError
from emojisushi.services.hydrator.base import (
    BaseHydrator,
    EntityDescriptor,
    FieldDescriptor,
    FieldKind,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRIMITIVE_TYPES = (str, int, float, bool)

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})

_MISSING = object()


class DataclassHydrator(BaseHydrator):
    """
    Hydrator for dataclass entities.

    Registering a type also registers every entity type reachable from
    its annotations, so registering the list wrappers is enough.

    Example:
        >>> hydrator = DataclassHydrator()
        >>> hydrator.register(ProductsList)
        >>> products = hydrator.hydrate(ProductsList, payload)
    """

    def __init__(self):
        self._descriptors: Dict[type, EntityDescriptor] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, entity_type: type) -> EntityDescriptor:
        if entity_type in self._descriptors:
            return self._descriptors[entity_type]

        if not (isinstance(entity_type, type) and dataclasses.is_dataclass(entity_type)):
            raise HydrationError(
                f"{entity_type!r} is not a dataclass and cannot be registered"
            )

        hints = get_type_hints(entity_type)
        fields = tuple(
            self._describe_field(f.name, hints[f.name], entity_type)
            for f in dataclasses.fields(entity_type)
            if f.init
        )
        descriptor = EntityDescriptor(entity_type=entity_type, fields=fields)

        # Stored before recursing so cyclic references (City <-> Spot) terminate
        self._descriptors[entity_type] = descriptor

        for fd in fields:
            if fd.nested is not None:
                self.register(fd.nested)

        logger.debug(f"Hydrator: registered {descriptor.name} ({len(fields)} fields)")
        return descriptor

    def is_registered(self, entity_type: type) -> bool:
        return entity_type in self._descriptors

    def descriptor_for(self, entity_type: type) -> EntityDescriptor:
        """Return the field table of a registered type."""
        try:
            return self._descriptors[entity_type]
        except (KeyError, TypeError):
            name = getattr(entity_type, "__name__", repr(entity_type))
            raise HydrationError(
                f"{name} is not a registered entity type",
                target=name,
            ) from None

    def _describe_field(self, name: str, hint: Any, owner: type) -> FieldDescriptor:
        """Translate one annotation into a FieldDescriptor."""
        optional = False
        origin = get_origin(hint)

        if origin is Union or origin is types.UnionType:
            members = [a for a in get_args(hint) if a is not type(None)]
            if len(members) != 1:
                return FieldDescriptor(name=name, kind=FieldKind.ANY, optional=True)
            optional = len(members) < len(get_args(hint))
            hint = members[0]
            origin = get_origin(hint)

        if hint is Any:
            return FieldDescriptor(name=name, kind=FieldKind.ANY, optional=True)

        if hint in PRIMITIVE_TYPES:
            return FieldDescriptor(
                name=name,
                kind=FieldKind.PRIMITIVE,
                python_type=hint,
                optional=optional,
            )

        if origin is list or hint is list:
            args = get_args(hint)
            item = args[0] if args else Any
            if isinstance(item, type) and dataclasses.is_dataclass(item):
                return FieldDescriptor(
                    name=name,
                    kind=FieldKind.ENTITY_LIST,
                    python_type=list,
                    nested=item,
                    optional=optional,
                )
            return FieldDescriptor(
                name=name, kind=FieldKind.SCALAR_LIST, python_type=list, optional=optional
            )

        if origin is dict or hint is dict:
            return FieldDescriptor(
                name=name, kind=FieldKind.MAPPING, python_type=dict, optional=optional
            )

        if isinstance(hint, type) and dataclasses.is_dataclass(hint):
            return FieldDescriptor(
                name=name,
                kind=FieldKind.ENTITY,
                python_type=hint,
                nested=hint,
                optional=optional,
            )

        raise HydrationError(
            f"Unsupported annotation {hint!r} on {owner.__name__}.{name}",
            target=owner.__name__,
        )

    # =========================================================================
    # HYDRATION
    # =========================================================================

    def hydrate(self, target_type: Type[T], raw: Any) -> T:
        descriptor = self.descriptor_for(target_type)
        return self._hydrate_entity(descriptor, raw, descriptor.name)

    def _hydrate_entity(self, descriptor: EntityDescriptor, raw: Any, path: str) -> Any:
        if not isinstance(raw, Mapping):
            raise HydrationError(
                f"Expected an object for {descriptor.name}, got {type(raw).__name__}",
                target=descriptor.name,
                path=path,
            )

        values = {
            fd.name: self._hydrate_field(fd, raw.get(fd.name, _MISSING), f"{path}.{fd.name}")
            for fd in descriptor.fields
        }
        return descriptor.entity_type(**values)

    def _hydrate_field(self, fd: FieldDescriptor, value: Any, path: str) -> Any:
        if fd.optional and (value is _MISSING or value is None):
            return None

        if fd.kind == FieldKind.PRIMITIVE:
            coerced = _coerce_primitive(fd.python_type, value)
            if coerced is _MISSING:
                return None if fd.optional else fd.default
            return coerced

        if fd.kind == FieldKind.ENTITY:
            nested = self._descriptors[fd.nested]
            # PHP encodes an empty object as []
            if value is _MISSING or value is None or value == []:
                return None if fd.optional else self._hydrate_entity(nested, {}, path)
            return self._hydrate_entity(nested, value, path)

        if fd.kind == FieldKind.ENTITY_LIST:
            if not isinstance(value, list):
                return []
            nested = self._descriptors[fd.nested]
            return [
                self._hydrate_entity(nested, item, f"{path}[{i}]")
                for i, item in enumerate(value)
            ]

        if fd.kind == FieldKind.SCALAR_LIST:
            return copy.deepcopy(value) if isinstance(value, list) else []

        if fd.kind == FieldKind.MAPPING:
            return copy.deepcopy(dict(value)) if isinstance(value, Mapping) else {}

        return None if value is _MISSING else copy.deepcopy(value)

    # =========================================================================
    # EXTRACTION
    # =========================================================================

    def extract(self, instance: Any) -> dict:
        descriptor = self.descriptor_for(type(instance))
        return {
            fd.name: self._extract_field(fd, getattr(instance, fd.name))
            for fd in descriptor.fields
        }

    def _extract_field(self, fd: FieldDescriptor, value: Any) -> Any:
        if value is None:
            return None
        if fd.kind == FieldKind.ENTITY:
            return self.extract(value)
        if fd.kind == FieldKind.ENTITY_LIST:
            return [self.extract(item) for item in value]
        if fd.kind in (FieldKind.SCALAR_LIST, FieldKind.MAPPING, FieldKind.ANY):
            return copy.deepcopy(value)
        return value


def _coerce_primitive(target: type, value: Any) -> Any:
    """
    Coerce a raw JSON value to a primitive type.

    Returns:
        The coerced value, or _MISSING when the value is absent or
        cannot be represented as target
    """
    if value is _MISSING or value is None:
        return _MISSING

    if target is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in TRUE_STRINGS:
                return True
            if lowered in FALSE_STRINGS:
                return False
        return _MISSING

    if target is str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return _MISSING

    if target is int:
        if isinstance(value, (bool, int)):
            return int(value)
        if isinstance(value, float):
            return int(value) if value.is_integer() else _MISSING
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return _MISSING
        return _MISSING

    if target is float:
        if isinstance(value, (bool, int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return _MISSING
        return _MISSING

    return _MISSING
