"""
flagprompt utilities.

- Unset: "argument not given", distinct from None (a valid option default).
- coalesce(): materialize Unset into a fallback.
- rename(): stable names for generated hooks and stages in logs and tracebacks.
- mirror(): read-only properties over the private fields of Option and Command.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset singleton. Falsy, printed as "Unset", not subclassable.
    """

    def __or__(self, other, /):
        # str | Unset in isinstance() checks
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return 'default' when 'object' is Unset, else 'object' (None included).
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) renames in place; rename(name) returns a decorator.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _copy(object):
    # children mappings and list defaults leave the object as fresh containers
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_copy, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_copy, object.values())))
    elif isinstance(object, Set):
        return set(map(_copy, object))
    return object


def mirror(name, /):
    """
    Read-only property returning (a copy of) self._<name>.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _copy(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
