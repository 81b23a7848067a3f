"""
Command context: the immutable state carried through command resolution.

A context starts with the message and its text content, and is refined phase by
phase (prefix, alias, parameter string, command). Every with_* method returns a
new context; the original is never modified, so interceptors can be handed the
same context concurrently.

Additional data is a free-form read-only mapping for interceptors and commands to
pass information along (for example a resolved user or a locale).
"""
from types import MappingProxyType

from .utils import Unset

_FIELDS = ("message", "message_content", "prefix", "alias", "parameter_string", "command", "additional_data")


class CommandContext:
    __slots__ = tuple("_" + field for field in _FIELDS)

    def __init__(self, message, message_content, *, prefix=None, alias=None,
                 parameter_string=None, command=None, additional_data=None):
        if message is None:
            raise TypeError("CommandContext() message must not be None")
        if not isinstance(message_content, str):
            raise TypeError("CommandContext() message_content must be a string")
        for name, value in (("prefix", prefix), ("alias", alias), ("parameter_string", parameter_string)):
            if value is not None and not isinstance(value, str):
                raise TypeError(f"CommandContext() {name} must be a string or None")
        object.__setattr__(self, "_message", message)
        object.__setattr__(self, "_message_content", message_content)
        object.__setattr__(self, "_prefix", prefix)
        object.__setattr__(self, "_alias", alias)
        object.__setattr__(self, "_parameter_string", parameter_string)
        object.__setattr__(self, "_command", command)
        object.__setattr__(self, "_additional_data", MappingProxyType(dict(additional_data or {})))

    def __setattr__(self, name, value):
        raise AttributeError("'CommandContext' object is immutable")

    message = property(lambda self: self._message)
    message_content = property(lambda self: self._message_content)
    prefix = property(lambda self: self._prefix)
    alias = property(lambda self: self._alias)
    parameter_string = property(lambda self: self._parameter_string)
    command = property(lambda self: self._command)
    additional_data = property(lambda self: self._additional_data)

    def __replace__(self, **changes):
        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise TypeError(f"__replace__() got unexpected field(s) {', '.join(sorted(unknown))}")
        fields = {field: getattr(self, field) for field in _FIELDS} | changes
        return CommandContext(fields.pop("message"), fields.pop("message_content"), **fields)

    def with_message(self, message, /):
        return self.__replace__(message=message)

    def with_message_content(self, message_content, /):
        return self.__replace__(message_content=message_content)

    def with_prefix(self, prefix, /):
        return self.__replace__(prefix=prefix)

    def with_alias(self, alias, /):
        return self.__replace__(alias=alias)

    def with_parameter_string(self, parameter_string, /):
        return self.__replace__(parameter_string=parameter_string)

    def with_command(self, command, /):
        return self.__replace__(command=command)

    def get_additional_data(self, key, default=None, /):
        return self._additional_data.get(key, default)

    def with_additional_data(self, key, value, /):
        return self.__replace__(additional_data={**self._additional_data, key: value})

    def without_additional_data(self, key=Unset, /):
        """drop one key, or all additional data when no key is given."""
        if key is Unset:
            return self.__replace__(additional_data={})
        return self.__replace__(additional_data={k: v for k, v in self._additional_data.items() if k != key})

    def __eq__(self, other):
        if not isinstance(other, CommandContext):
            return NotImplemented
        return all(getattr(self, field) == getattr(other, field) for field in _FIELDS)

    __hash__ = None

    def __rich_repr__(self):
        yield "message", self._message
        yield "message_content", self._message_content
        yield "prefix", self._prefix, None
        yield "alias", self._alias, None
        yield "parameter_string", self._parameter_string, None
        yield "command", self._command, None
        yield "additional_data", dict(self._additional_data), {}

    def __repr__(self):
        return "CommandContext(" + ", ".join(
            f"{field}={getattr(self, field)!r}" for field in _FIELDS[:-1]
        ) + f", additional_data={dict(self._additional_data)!r})"


__all__ = (
    "CommandContext",
)
