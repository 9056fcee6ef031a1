"""Record mappers used by ReportData.to_objects.

a mapper turns one positional row into an instance of some record type. the
registry picks a mapper per type by asking each registered predicate in turn,
most recently registered first, so callers can override the defaults.

there is no module-level registry: `init` takes a registry and returns it with
the defaults registered, and whoever needs one owns it.
"""

import dataclasses
import inspect
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel

Mapper = Callable[[type, Sequence[str], tuple[Any, ...], bool], Any]
Predicate = Callable[[type], bool]


class MapperRegistry:
    """Ordered collection of (predicate, mapper) pairs."""

    def __init__(self) -> None:
        self._mappers: list[tuple[Predicate, Mapper]] = []

    def __len__(self) -> int:
        return len(self._mappers)

    def register(self, predicate: Predicate, mapper: Mapper) -> "MapperRegistry":
        """Register a mapper ahead of everything already registered."""
        self._mappers.insert(0, (predicate, mapper))
        return self

    def resolve(self, record_type: type) -> Mapper:
        for predicate, mapper in self._mappers:
            if predicate(record_type):
                return mapper
        raise TypeError(f"No record mapper registered for {record_type!r}")


def _is_pydantic_model(record_type: type) -> bool:
    return isinstance(record_type, type) and issubclass(record_type, BaseModel)


def _is_namedtuple(record_type: type) -> bool:
    return isinstance(record_type, type) and issubclass(record_type, tuple) and hasattr(
        record_type, "_fields"
    )


def _is_dict(record_type: type) -> bool:
    return isinstance(record_type, type) and issubclass(record_type, dict)


def _is_class(record_type: type) -> bool:
    return isinstance(record_type, type)


def map_dict(record_type: type, names: Sequence[str], row: tuple[Any, ...], by_name: bool) -> Any:
    # positional makes no difference for a dict
    return record_type(zip(names, row))


def map_pydantic(record_type: type, names: Sequence[str], row: tuple[Any, ...], by_name: bool) -> Any:
    if by_name:
        return record_type.model_validate(dict(zip(names, row)))
    return record_type.model_validate(dict(zip(record_type.model_fields, row)))


def map_namedtuple(record_type: type, names: Sequence[str], row: tuple[Any, ...], by_name: bool) -> Any:
    if by_name:
        values = dict(zip(names, row))
        return record_type(**{f: values[f] for f in record_type._fields if f in values})
    return record_type(*row)


def map_object(record_type: type, names: Sequence[str], row: tuple[Any, ...], by_name: bool) -> Any:
    """Fallback for dataclasses and plain classes.

    by name, columns matching constructor parameters are passed as keywords. a
    class with a no-argument constructor gets every column set as an attribute
    instead, which covers the "bag of attributes" style of record.
    """
    if not by_name:
        return record_type(*row)

    values = dict(zip(names, row))
    if dataclasses.is_dataclass(record_type):
        accepted = {f.name for f in dataclasses.fields(record_type) if f.init}
        return record_type(**{k: v for k, v in values.items() if k in accepted})

    params = inspect.signature(record_type).parameters
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()):
        return record_type(**values)
    if params:
        return record_type(**{k: v for k, v in values.items() if k in params})

    record = record_type()
    for name, value in values.items():
        setattr(record, name, value)
    return record


def init(registry: MapperRegistry) -> MapperRegistry:
    """Register the default mappers on registry and return it.

    the generic object mapper goes in first so the more specific ones, registered
    after it, are tried before it.
    """
    registry.register(_is_class, map_object)
    registry.register(_is_namedtuple, map_namedtuple)
    registry.register(_is_pydantic_model, map_pydantic)
    registry.register(_is_dict, map_dict)
    return registry
