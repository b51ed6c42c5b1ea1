r"""
flagprompt option descriptors.

Overview
- Option: a named, value-bearing command-line option (e.g., --region/-r).
  It owns one value cell (flagprompt.values) and tracks whether the caller
  set it explicitly.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- name: long name without dashes, r"[^\W\d_](-?[^\W_]+)*" (unicode letters allowed).
- shorthand: Unset | one letter, used as -x.
- usage: Unset | str (help text shown in help output and in prompts).
- type: converter for one element (str, int, float, boolean, any callable).
- default: Unset | any; None for scalars and () for lists when Unset.
- implicit: Unset | str, the “no-argument default”: the text assigned when the
  option appears bare (--name). Booleans default to "true"; every other option
  defaults to None, meaning a value is mandatory on the command line.
- multiple: bool, selects a ListValue cell instead of a ScalarValue.
- hidden: bool (suppresses from help).
- persistent: bool (inherited by descendant commands; set by Command.persistent()).

Mutation
- set(text): parse-and-set; marks the option changed.
- reset(): list options only; empties the cell without marking it changed.
- append(text): list options only; adds one element and marks it changed.
  Conversion failures surface as InvalidValueError naming the option.
"""
import builtins
import functools
import operator
import re

from .faults import FaultCode, InvalidValueError
from .utils import *
from .values import ScalarValue, ListValue, boolean


class ArgumentType(type):
    """
    Metaclass that turns option specs into introspectable descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='region', shorthand='r', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize option metadata in place.

    Raises
    - TypeError: wrong types for name/shorthand/usage/implicit/type.
    - ValueError: malformed or empty names.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid option name without dashes")
    metadata["name"] = name

    if not isinstance(shorthand := metadata["shorthand"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'shorthand' must be a string")
    elif isinstance(shorthand, str) and not re.fullmatch(r"[^\W\d_]", shorthand):
        raise ValueError(f"{cls.__typename__} 'shorthand' must be a single letter")
    metadata["shorthand"] = coalesce(shorthand)

    if not isinstance(usage := metadata["usage"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'usage' must be a string")
    metadata["usage"] = coalesce(usage, "").strip()

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    # Booleans are switch-like: a bare --name means true.
    if not isinstance(implicit := metadata["implicit"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'implicit' must be a string")
    if implicit is Unset and metadata["type"] is boolean and not metadata["multiple"]:
        implicit = "true"
    metadata["implicit"] = coalesce(implicit)

    metadata["default"] = coalesce(metadata["default"], () if metadata["multiple"] else None)


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing option specification with its value cell.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    - value: the cell (ScalarValue or ListValue), shared with the prompt engine.
    - changed: True once the caller (argv or prompt) set the option.
    """

    __introspectable__ = (
        "name",
        "shorthand",
        "usage",
        "type",
        "default",
        "implicit",
        "multiple",
        "hidden",
        "persistent",
    )

    __displayable__ = (
        "name",
        "shorthand",
        "usage",
        "default",
        "implicit",
        "multiple",
        "persistent",
    )

    def __init__(
            self,
            name,
            shorthand=Unset,
            /,
            type=str,
            default=Unset,
            usage=Unset,
            implicit=Unset,
            *,
            multiple=False,
            hidden=False,
            persistent=False,
    ):
        metadata = {
            "name": name,
            "shorthand": shorthand,
            "usage": usage,
            "type": type,
            "default": default,
            "implicit": implicit,
            "multiple": bool(multiple),
            "hidden": bool(hidden),
            "persistent": bool(persistent),
        }
        _sanitize_metadata(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self._multiple:
            self._value = ListValue(self._type, self._default)
        else:
            self._value = ScalarValue(self._type, self._default)
        self._defstr = str(self._value)
        self._changed = False

    @property
    def value(self):
        return self._value

    @property
    def changed(self):
        return self._changed

    @property
    def defstr(self):
        """
        String form of the default, as shown in help output.
        """
        return self._defstr

    def get(self):
        return self._value.get()

    def _invalid(self, text, exception):
        return InvalidValueError(
            "invalid argument %r for '--%s' flag: %s" % (text, self._name, exception),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            option=self,
            hint="enter a value of type %s" % self._value.typename,
        )

    def set(self, text, /):
        try:
            self._value.set(text)
        except (ValueError, TypeError) as exception:
            raise self._invalid(text, exception) from exception
        self._changed = True

    def reset(self):
        if not isinstance(self._value, ListValue):
            raise TypeError(f"{type(self).__typename__} '--{self._name}' is not a list")
        self._value.reset()

    def append(self, text, /):
        if not isinstance(self._value, ListValue):
            raise TypeError(f"{type(self).__typename__} '--{self._name}' is not a list")
        try:
            self._value.append(text)
        except (ValueError, TypeError) as exception:
            raise self._invalid(text, exception) from exception
        self._changed = True


__all__ = (
    "Option",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
