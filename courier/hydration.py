"""Lazy hydration of raw JSON mappings into typed domain objects.

Each :class:`TelegramObject` subclass declares a read-only ``relations``
registry that maps a field name to a :class:`Relation` (target type plus
cardinality).  Nothing is converted up front: :meth:`TelegramObject.resolve`
hydrates a relation the first time it is asked for and caches the result on
the instance.  Fields missing from ``relations`` are returned raw, so payload
additions from newer API versions never break parsing.

Example::

    msg = hydrate({"message_id": 5, "chat": {"id": 9}}, Message)
    msg.chat.id          # 9, chat hydrated on first access
    msg.resolve("date")  # None, absent field
"""

from __future__ import annotations

import copy
import dataclasses
import enum
import sys
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Type, TypeVar, Union

from courier.exceptions import HydrationError

T = TypeVar("T", bound="TelegramObject")


class Cardinality(str, enum.Enum):
    SINGLE = "single"
    MANY = "many"
    GRID = "grid"  # list of lists, e.g. UserProfilePhotos.photos


@dataclasses.dataclass(frozen=True, slots=True)
class Relation:
    """Hydration rule for one field.

    A string ``target`` names a class in ``module``, the module of the class
    that declared the relation.  The owner binds ``module`` when the class is
    created, so forward and self references never depend on names defined
    elsewhere.
    """

    target: Union[str, Type["TelegramObject"]]
    cardinality: Cardinality = Cardinality.SINGLE
    module: Optional[str] = None

    def target_type(self) -> Type["TelegramObject"]:
        if isinstance(self.target, str):
            return lookup_type(self.target, self.module)
        return self.target

    def hydrate(self, owner: "TelegramObject", field: str, value: Any) -> Any:
        target = self.target_type()
        owner_name = type(owner).__name__
        if self.cardinality is Cardinality.SINGLE:
            if not isinstance(value, Mapping):
                raise HydrationError(owner_name, field, value, "an object")
            return hydrate(value, target)
        if not isinstance(value, (list, tuple)):
            raise HydrationError(owner_name, field, value, "an array")
        if self.cardinality is Cardinality.MANY:
            return _hydrate_items(owner_name, field, value, target)
        for row in value:
            if not isinstance(row, (list, tuple)):
                raise HydrationError(owner_name, field, row, "an array of arrays")
        return [_hydrate_items(owner_name, field, row, target) for row in value]


def one(target: Union[str, Type["TelegramObject"]]) -> Relation:
    return Relation(target, Cardinality.SINGLE)


def many(target: Union[str, Type["TelegramObject"]]) -> Relation:
    return Relation(target, Cardinality.MANY)


def grid(target: Union[str, Type["TelegramObject"]]) -> Relation:
    return Relation(target, Cardinality.GRID)


def _bind(relation: Relation, module: str) -> Relation:
    if isinstance(relation.target, str) and relation.module is None:
        return dataclasses.replace(relation, module=module)
    return relation


def lookup_type(name: str, module: Optional[str]) -> Type["TelegramObject"]:
    """Return the :class:`TelegramObject` subclass *name* defined in *module*."""
    found = getattr(sys.modules.get(module or ""), name, None)
    if not (isinstance(found, type) and issubclass(found, TelegramObject)):
        raise LookupError(f"Unknown object type: {module}.{name}")
    return found


class TelegramObject:
    """Typed view over one raw API object.

    ``relations`` is frozen into a :class:`~types.MappingProxyType` when the
    subclass is created and must not change afterwards.
    """

    relations: ClassVar[Mapping[str, Relation]] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "relations" in cls.__dict__:
            cls.relations = MappingProxyType(
                {field: _bind(relation, cls.__module__) for field, relation in cls.__dict__["relations"].items()}
            )

    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise HydrationError(type(self).__name__, None, data, "an object")
        self._data: Dict[str, Any] = dict(data)
        self._cache: Dict[str, Any] = {}

    def resolve(self, field: str) -> Any:
        """Return *field*, hydrating and caching it if it is a declared relation.

        Absent fields resolve to ``None``.

        Raises:
            HydrationError: If a declared relation holds a value of the wrong shape.
        """
        if field in self._cache:
            return self._cache[field]
        value = self._data.get(field)
        relation = self.relations.get(field)
        if relation is None or value is None:
            return value
        resolved = relation.hydrate(self, field, value)
        self._cache[field] = resolved
        return resolved

    @property
    def raw(self) -> Mapping[str, Any]:
        """Read-only view of the untouched payload."""
        return MappingProxyType(self._data)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def keys(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, field: object) -> bool:
        return field in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TelegramObject):
            return NotImplemented
        return type(self) is type(other) and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


def hydrate(raw: Any, target: Type[T]) -> T:
    """Wrap *raw* as *target* without resolving any relation.

    Raises:
        HydrationError: If *raw* is not a mapping.
    """
    if not isinstance(raw, Mapping):
        raise HydrationError(target.__name__, None, raw, "an object")
    return target(raw)


def hydrate_many(raw: Any, target: Type[T]) -> List[T]:
    """Hydrate a JSON array of objects, preserving order."""
    if not isinstance(raw, (list, tuple)):
        raise HydrationError(target.__name__, None, raw, "an array")
    return _hydrate_items(target.__name__, None, raw, target)


def _hydrate_items(owner: str, field: Optional[str], items: Any, target: Type[T]) -> List[T]:
    result: List[T] = []
    for item in items:
        if not isinstance(item, Mapping):
            raise HydrationError(owner, field, item, "an array of objects")
        result.append(hydrate(item, target))
    return result
