"""
Parameter converters and their registry.

A converter is any callable taking (value, type, context) and returning the
converted value. It signals bad input by raising InvalidParameterFormatError or
InvalidParameterValueError; the typed parameter parser attaches the parameter
name and value afterwards.

Converters are registered for one or more type names and for a message type
(the class of the chat messages they apply to, object by default). For a given
(type, message) pair the registry picks:
- the single user converter applicable to the message, if there is one;
- otherwise the single built-in converter applicable to the message;
- more than one candidate is an AmbiguousConverterError, none a MissingConverterError.

Built-ins
- number, integer: int
- decimal: decimal.Decimal
- string, text: the value unchanged
"""
import decimal
import logging
import re
import threading

from .faults import (
    AmbiguousConverterError,
    DuplicateConverterError,
    InvalidParameterFormatError,
    MissingConverterError,
)
from .syntax import Placeholder
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "string"


def convert_number(value, type, context):
    if not re.fullmatch(r"[+-]?[0-9]+", value):
        raise InvalidParameterFormatError(f"'{value}' is not a valid number")
    return int(value)


def convert_decimal(value, type, context):
    if not re.fullmatch(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", value):
        raise InvalidParameterFormatError(f"'{value}' is not a valid decimal")
    return decimal.Decimal(value)


def convert_string(value, type, context):
    return value


class _Entry:
    __slots__ = ("type", "message_type", "converter", "internal")

    def __init__(self, type, message_type, converter, internal):
        self.type = type
        self.message_type = message_type
        self.converter = converter
        self.internal = internal


class ConverterRegistry:
    """
    Registry of parameter converters keyed by (type name, message type).

    Registration is guarded by a lock and publishes a fresh immutable tuple of
    entries, so lookups never observe a half-registered converter.
    """

    def __init__(self, *, builtins=True):
        self._entries = ()
        self._resolved = {}
        self._lock = threading.Lock()
        if builtins:
            self.register(convert_number, "number", "integer", internal=True)
            self.register(convert_decimal, "decimal", internal=True)
            self.register(convert_string, "string", "text", internal=True)

    def register(self, converter, /, *types, message_type=object, internal=False):
        """
        Register a converter for the given type names.

        Raises
        - TypeError: converter not callable, no type names, or message_type not a class.
        - DuplicateConverterError: a user converter already exists for one of the
          (type, message_type) pairs.
        """
        if not callable(converter):
            raise TypeError("register() first argument must be callable")
        if not types or not all(isinstance(type, str) for type in types):
            raise TypeError("register() requires at least one type name string")
        if not isinstance(message_type, type):
            raise TypeError("register() message_type must be a class")

        with self._lock:
            for name in types:
                for entry in self._entries:
                    if (
                        not internal and not entry.internal and
                        entry.type == name and entry.message_type is message_type
                    ):
                        raise DuplicateConverterError(
                            f"Multiple converters registered for parameter type '{name}' "
                            f"and message type '{message_type.__qualname__}'"
                        )
            self._entries += tuple(_Entry(name, message_type, converter, internal) for name in types)
            self._resolved = {}
        logger.debug("Registered converter %r for %s", converter, ", ".join(map(repr, types)))
        return converter

    def converter(self, *types, message_type=object):
        """decorator form of register()."""
        def wrapper(converter):
            return self.register(converter, *types, message_type=message_type)
        return wrapper

    def _candidates(self, type, message_class, entries=Unset):
        candidates = [
            entry for entry in coalesce(entries, self._entries)
            if entry.type == type and issubclass(message_class, entry.message_type)
        ]
        return [entry for entry in candidates if not entry.internal] or candidates

    def resolve(self, type, message, /, usage=Unset):
        """
        Return the converter for a type name and a message.

        Raises
        - MissingConverterError / AmbiguousConverterError as described in the module doc.
        """
        key = (type, message.__class__)
        try:
            return self._resolved[key]
        except KeyError:
            pass
        entries = self._entries
        candidates = self._candidates(type, message.__class__, entries)
        if not candidates:
            raise MissingConverterError(
                f"Parameter type '{type}' in usage string '{usage}' was not found",
                parameter_type=type, usage=usage,
            )
        if len(candidates) > 1:
            raise AmbiguousConverterError(
                f"Multiple converters found for parameter type '{type}' in usage string '{usage}'",
                parameter_type=type, usage=usage,
            )
        converter = candidates[0].converter
        with self._lock:
            # a register() in between already reset the table
            if self._entries is entries:
                self._resolved[key] = converter
        return converter

    def check(self, usage, /, message_type=object):
        """
        Verify that every typed placeholder of a parsed usage has exactly one
        converter for messages of message_type. Raises like resolve().
        """
        for node in usage.walk():
            if not isinstance(node, Placeholder):
                continue
            name, type = split_type(node.name)
            candidates = self._candidates(type, message_type)
            if not candidates:
                raise MissingConverterError(
                    f"Parameter type '{type}' in usage string '{usage}' was not found",
                    parameter_type=type, usage=str(usage),
                )
            if len(candidates) > 1:
                raise AmbiguousConverterError(
                    f"Multiple converters found for parameter type '{type}' in usage string '{usage}'",
                    parameter_type=type, usage=str(usage),
                )


def split_type(name, /):
    """
    Split a placeholder name at its last colon into (name, type).

    Examples
    - "amount:integer" -> ("amount", "integer")
    - "a:b:decimal"    -> ("a:b", "decimal")
    - "user"           -> ("user", "string")
    """
    head, colon, type = name.rpartition(":")
    if not colon:
        return name, DEFAULT_TYPE
    return head, type


__all__ = (
    "DEFAULT_TYPE",
    "convert_number",
    "convert_decimal",
    "convert_string",
    "ConverterRegistry",
    "split_type",
)
