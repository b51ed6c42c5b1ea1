"""
flagprompt value cells.

Overview
- Value: common base holding the converter and the current Python value.
- ScalarValue[_T]: single value, replaced by every set(text).
- ListValue[_T]: multi-element value with reset() and append(text); set(text)
  parses one comma-separated group (CSV rules, so quoted commas survive).
- boolean(text): converter accepting the usual command-line spellings.

A cell only parses and stores; it knows nothing about option names or about
whether the user set it. Those belong to flagprompt.arguments.Option.

String forms
- None            -> ""
- True / False    -> "true" / "false"
- lists           -> "[a,b]"
- anything else   -> str(value)
"""
import builtins
import csv
import typing

_T = typing.TypeVar("_T")

_TRUTHS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def boolean(text, /):
    """
    Convert a command-line boolean spelling into a bool.

    Accepted
    - true:  1, t, T, TRUE, true, True
    - false: 0, f, F, FALSE, false, False

    Raises
    - ValueError: for any other text.
    """
    if text in _TRUTHS:
        return True
    if text in _FALSES:
        return False
    raise ValueError("invalid boolean %r" % text)


def _format(value, /):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Value:
    """
    Base value cell.

    Parameters
    - type: callable converting one string into the stored Python value
      (str, int, float, boolean or any callable raising ValueError/TypeError).
    """

    def __init__(self, type=str, /):
        if not callable(type):
            raise TypeError(f"{builtins.type(self).__name__} 'type' must be callable")
        self._type = type

    @property
    def type(self):
        return self._type

    @property
    def typename(self):
        """
        Short type label used in help output ("string", "int", "bool", ...).
        """
        if self._type is boolean:
            return "bool"
        if self._type is str:
            return "string"
        return getattr(self._type, "__name__", "value")

    def get(self):
        raise NotImplementedError

    def set(self, text, /):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.get()!r})"


class ScalarValue(Value, typing.Generic[_T]):
    """
    Single-value cell.

    set(text) converts with the cell's type and replaces the stored value; a
    failed conversion leaves the previous value untouched.
    """

    def __init__(self, type=str, default=None, /):
        super().__init__(type)
        self._value = default

    def get(self):
        return self._value

    def set(self, text, /):
        self._value = self._type(text)

    def __str__(self):
        return _format(self._value)


class ListValue(Value, typing.Generic[_T]):
    """
    Multi-element cell.

    Semantics
    - The default elements stay until the first set(): that call replaces them,
      later calls extend the list (repeated --tag a --tag b accumulates).
    - reset() empties the list; the next set() then extends the empty list.
    - append(text) converts and adds exactly one element, no CSV splitting.
    - A failed conversion leaves the list untouched.
    """

    def __init__(self, type=str, default=(), /):
        super().__init__(type)
        self._value = list(default or ())
        self._dirty = False

    def get(self):
        return list(self._value)

    def set(self, text, /):
        try:
            fields = next(csv.reader([text]))
        except (csv.Error, StopIteration):
            raise ValueError("invalid list %r" % text) from None
        elements = [self._type(field) for field in fields]
        if not self._dirty:
            self._value = elements
        else:
            self._value.extend(elements)
        self._dirty = True

    def reset(self):
        self._value = []
        self._dirty = True

    def append(self, text, /):
        self._value.append(self._type(text))
        self._dirty = True

    def __str__(self):
        return "[" + ",".join(map(_format, self._value)) + "]"


__all__ = (
    "Value",
    "ScalarValue",
    "ListValue",
    "boolean",
)
