"""
Parameters and the parsers producing them.

Scope
- Parameters: read-only mapping from parameter name to value. A name that captured
  once maps to its value, a name that captured several times maps to a list of the
  values in input order.
- UntypedParameterParser: values are the raw captured strings.
- TypedParameterParser: placeholder names may carry a ":type" suffix; values are
  converted through a ConverterRegistry (type "string" when no suffix is given).

Both parsers read the parameter string and the command (for its usage) from a
CommandContext, and raise ParameterParseError with a message that can be sent back
to the user verbatim.
"""
import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType

from . import grammar
from .converters import ConverterRegistry, split_type
from .faults import FaultCode, ParameterParseError
from .patterns import compiler as default_compiler
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class Parameters(Mapping):
    """
    Parsed command parameters.

    Behaves as a read-only mapping (get, in, len, iteration in insertion order)
    with two additions: foreach() and fixup(). None is never stored as a value.
    """

    def __init__(self, values=None, /):
        self._values = {}
        self._iterating = 0
        for name, value in dict(values or {}).items():
            if name is None or value is None:
                raise TypeError("parameter names and values must not be None")
            self._values[name] = value

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"Parameters({self._values!r})"

    @property
    def names(self):
        return tuple(self._values)

    def as_map(self):
        """live read-only view of the underlying name to value mapping."""
        return MappingProxyType(self._values)

    def foreach(self, action, /):
        """call action(name, value) for every parameter; fixup() is refused meanwhile."""
        self._iterating += 1
        try:
            for name, value in list(self._values.items()):
                action(name, value)
        finally:
            self._iterating -= 1

    def fixup(self, placeholder, literal, /):
        """
        Reinterpret a placeholder value as a literal.

        When a usage like "(<user> | 'all')" captured "all" under the placeholder,
        fixup("user", "all") moves the value to the literal name. Nothing happens
        if the literal is already present or the placeholder value differs.

        Raises
        - RuntimeError: when called from within foreach().
        """
        if self._iterating:
            raise RuntimeError("parameters must not be fixed up while iterating over them")
        if literal not in self._values and self._values.get(placeholder) == literal:
            self._values[literal] = self._values.pop(placeholder)
        return self

    @classmethod
    def _collect(cls, pairs):
        values = {}
        for name, value in pairs:
            if name not in values:
                values[name] = value
            elif isinstance(values[name], _Repeated):
                values[name].append(value)
            else:
                values[name] = _Repeated((values[name], value))
        return cls({name: list(value) if isinstance(value, _Repeated) else value
                    for name, value in values.items()})


class _Repeated(list):
    """marks a multi-valued capture while collecting, so list values stay intact."""


class ParameterParser:
    """
    Common parsing flow: fetch the usage, match it, hand captures to _pairs().

    Parsed usage trees are cached per usage string; compiled patterns are cached
    per tree by the compiler.
    """

    def __init__(self, *, compiler=Unset):
        self._compiler = coalesce(compiler, default_compiler)
        self._trees = {}
        self._lock = threading.Lock()

    def tree(self, usage, /):
        try:
            return self._trees[usage]
        except KeyError:
            pass
        with self._lock:
            if (tree := self._trees.get(usage)) is None:
                tree = self._trees[usage] = grammar.parse(usage)
        return tree

    def parse(self, context, /, usage=Unset):
        """
        Parse the parameter string of a context.

        Parameters
        - context: CommandContext with prefix, alias and (optionally) parameter string.
        - usage: str, overrides the usage of context.command when given.

        Returns
        - Parameters

        Raises
        - ParameterParseError: arguments given to a command without usage, or the
          parameter string does not match the usage (message includes the usage).
        """
        if usage is Unset:
            usage = getattr(context.command, "usage", None)
        parameter_string = context.parameter_string or ""
        command = f"{context.prefix or ''}{context.alias or ''}"

        if usage is None:
            if parameter_string.strip():
                raise ParameterParseError(
                    f"Command `{command}` does not expect arguments",
                    code=FaultCode.UNEXPECTED_ARGUMENTS,
                )
            return Parameters()

        tree = self.tree(usage)
        captures = self._compiler.compile(tree).match(parameter_string)
        if captures is None:
            raise ParameterParseError(
                f"Wrong arguments for command `{command}`\nUsage: `{command} {usage}`",
                usage=usage,
            )
        return Parameters._collect(self._pairs(context, usage, captures))

    def _pairs(self, context, usage, captures):
        raise NotImplementedError


class UntypedParameterParser(ParameterParser):
    """parser keeping every captured value as the raw string."""

    def _pairs(self, context, usage, captures):
        for slot, value in captures:
            yield slot.name, value


class TypedParameterParser(ParameterParser):
    """
    Parser converting placeholder values according to their ":type" suffix.

    Literal captures are kept as strings under the literal text. Conversion faults
    raised by a converter get the parameter name and value attached; any other
    exception from a converter becomes a ParameterParseError chained to it.
    """

    def __init__(self, converters=Unset, *, compiler=Unset):
        super().__init__(compiler=compiler)
        self.converters = coalesce(converters, None) or ConverterRegistry()

    def _pairs(self, context, usage, captures):
        for slot, value in captures:
            if slot.literal:
                yield slot.name, value
                continue
            name, type = split_type(slot.name)
            converter = self.converters.resolve(type, context.message, usage)
            try:
                converted = converter(value, type, context)
            except ParameterParseError as error:
                raise error.__replace__(parameter_name=name, parameter_value=value) from error
            except Exception as error:
                raise ParameterParseError(
                    f"Exception during conversion of value '{value}' for parameter '{name}'",
                    code=FaultCode.CONVERSION_FAILED,
                    parameter_name=name,
                    parameter_value=value,
                ) from error
            if converted is None:
                raise TypeError(f"converter {converter!r} returned None for parameter '{name}'")
            yield name, converted


__all__ = (
    "Parameters",
    "ParameterParser",
    "UntypedParameterParser",
    "TypedParameterParser",
)
