"""
Small helpers shared by the argument specs, the config and the faults.

- Unset: "not provided" marker for keyword defaults where None is a real value
  (a spec `descr`, a config console). Usable in isinstance() unions: `str | Unset`.
- coalesce(): swap Unset for a default, leave every other value alone.
- rename(): give generated functions readable names in tracebacks.
- mirror(): read-only property over a private "_name" field; containers come
  back frozen so callers cannot mutate the owner through them.

    >>> coalesce(Unset, "auto")
    'auto'
    >>> class Node:
    ...     names = mirror("names")
    ...     def __init__(self):
    ...         self._names = ["admin", "restart"]
    >>> Node().names
    ('admin', 'restart')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; a falsy singleton that cannot be subclassed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")

    # `str | Unset` builds a union with UnsetType, for isinstance() checks
    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    `default` when `object` is Unset, `object` otherwise (None, 0 and "" included).
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(function, name) renames in place; rename(name) returns a decorator.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return lambda function: rename(function, name)

    if len(parameters) != 2:
        raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))

    function, name = parameters
    if not callable(function):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    function.__name__ = function.__qualname__ = name
    return function


def _freeze(object):
    match object:
        case str() | bytes() | bytearray():
            return object
        case Mapping():
            return MappingProxyType(dict(object))
        case Set():
            return frozenset(object)
        case Sequence():
            return tuple(object)
    return object


def mirror(name, /):
    """
    Property named `name` that returns a frozen view of `self._{name}`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "rename",
    "mirror",
)
