"""
Commodore faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the package raises, grouped
  by domain (usage grammar, parameters, configuration, warnings).
- CommandFault / CommandWarning: base types carrying a message plus read-only options
  (code, title, hint and fault-specific payload) that can render themselves with rich.
- trigger(): single entry point to surface a fault (raise, warn, or render in shell mode).
- getdoc(): optional documentation lookup for a code from the host application.

Audience
- Parameter faults are user-facing: their message is what the bot replies with.
- Grammar and configuration faults are developer-facing and surface at startup.

Integration
- Host applications may provide __codes__, __styles__, __docs__ and __prog__ in
  __main__ to relabel codes, restyle output and name the program in headers.
"""
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - usage grammar (211xx)
      • EMPTY_USAGE, UNEXPECTED_TOKEN, UNTERMINATED_PLACEHOLDER, UNTERMINATED_LITERAL,
        UNTERMINATED_GROUP, SINGLE_ALTERNATIVE, EMPTY_NAME, MISPLACED_TRAILING_PLACEHOLDER
    - parameters (212xx)
      • UNEXPECTED_ARGUMENTS, WRONG_ARGUMENTS, INVALID_FORMAT, INVALID_VALUE, CONVERSION_FAILED
    - configuration (213xx)
      • MISSING_CONVERTER, AMBIGUOUS_CONVERTER, DUPLICATE_CONVERTER, DUPLICATE_ALIAS,
        DUPLICATE_INTERCEPTOR, RESTRICTION_POLICY, UNKNOWN_RESTRICTION
    - warnings (22xxx)
      • EMPTY_PREFIX
    """
    # --- usage grammar errors (211xx) ---
    EMPTY_USAGE                     = 21101
    UNEXPECTED_TOKEN                = 21102
    UNTERMINATED_PLACEHOLDER        = 21103
    UNTERMINATED_LITERAL            = 21104
    UNTERMINATED_GROUP              = 21105
    SINGLE_ALTERNATIVE              = 21106
    EMPTY_NAME                      = 21107
    MISPLACED_TRAILING_PLACEHOLDER  = 21108

    # --- parameter errors (212xx) ---
    UNEXPECTED_ARGUMENTS            = 21201
    WRONG_ARGUMENTS                 = 21202
    INVALID_FORMAT                  = 21203
    INVALID_VALUE                   = 21204
    CONVERSION_FAILED               = 21205

    # --- configuration errors (213xx) ---
    MISSING_CONVERTER               = 21301
    AMBIGUOUS_CONVERTER             = 21302
    DUPLICATE_CONVERTER             = 21303
    DUPLICATE_ALIAS                 = 21304
    DUPLICATE_INTERCEPTOR           = 21305
    RESTRICTION_POLICY              = 21306
    UNKNOWN_RESTRICTION             = 21307

    # --- warnings (22xxx) ---
    EMPTY_PREFIX                    = 22101

    def normalize(self):
        """
        return the host label for this code (__codes__ in __main__) or its number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_ERROR_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "title": "bold #FF4DA6",
    "message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}

_WARNING_STYLES = {
    "prog-name": "bold #E6E6F0",
    "code": "bold #FFB400",
    "title": "bold #FFC2E0",
    "message": "#D6D6DE",
    "hint-arrow": "#B8EFAF dim",
    "hint": "italic #B8EFAF",
}


def _render(fault, palette):
    main = __import__("__main__")
    colorful = fault.options.get("colorful", True)
    fancy = fault.options.get("fancy", False)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "commodore"), "prog-name"),
        " — ",
        text(fault.code.normalize() if isinstance(fault.code, FaultCode) else "", "code"),
        " | ",
        text(fault.title.title(), "title"),
        " ]",
    )
    message = text(fault.message or fault.title, "message")
    parts = [message]
    if hint := fault.options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class _Fault:
    """shared state of errors and warnings: message, options, code and title."""
    code = Unset
    title = "fault"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = message
        self.options = MappingProxyType(options)
        if "code" in options:
            self.code = options["code"]
        if "title" in options:
            self.title = options["title"]

    def __str__(self):
        return self.message if self.message is not Unset else self.title

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = getattr(self, "__cause__", None)
        return replica


class CommandFault(_Fault, Exception):
    """
    base error: message + options, rendered with rich, raised outside shell mode.
    """

    def __init__(self, message=Unset, /, **options):
        _Fault.__init__(self, message, **options)
        Exception.__init__(self, *([] if message is Unset else [message]))

    def __rich__(self):
        return _render(self, _ERROR_STYLES)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)


class UsageSyntaxError(CommandFault):
    """
    malformed usage string; options carry usage, position and token.
    """
    code = FaultCode.UNEXPECTED_TOKEN
    title = "invalid usage"

    @property
    def usage(self):
        return self.options.get("usage")

    @property
    def position(self):
        return self.options.get("position")

    @property
    def token(self):
        return self.options.get("token")


class ParameterParseError(CommandFault):
    """
    user-facing failure to parse or convert command parameters.

    the message is meant to be sent back to the user as-is; parameter_name and
    parameter_value identify the offending input where known.
    """
    code = FaultCode.WRONG_ARGUMENTS
    title = "wrong arguments"

    @property
    def parameter_name(self):
        return self.options.get("parameter_name")

    @property
    def parameter_value(self):
        return self.options.get("parameter_value")


class InvalidParameterFormatError(ParameterParseError):
    code = FaultCode.INVALID_FORMAT
    title = "invalid format"


class InvalidParameterValueError(ParameterParseError):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"


class ConverterConfigurationError(CommandFault):
    code = FaultCode.MISSING_CONVERTER
    title = "converter configuration"


class MissingConverterError(ConverterConfigurationError): ...


class AmbiguousConverterError(ConverterConfigurationError):
    code = FaultCode.AMBIGUOUS_CONVERTER


class DuplicateConverterError(ConverterConfigurationError):
    code = FaultCode.DUPLICATE_CONVERTER


class DuplicateAliasError(CommandFault):
    code = FaultCode.DUPLICATE_ALIAS
    title = "duplicate alias"


class DuplicateInterceptorError(CommandFault):
    code = FaultCode.DUPLICATE_INTERCEPTOR
    title = "duplicate interceptor"


class RestrictionPolicyError(CommandFault):
    code = FaultCode.RESTRICTION_POLICY
    title = "restriction policy"


class UnknownRestrictionError(CommandFault):
    code = FaultCode.UNKNOWN_RESTRICTION
    title = "unknown restriction"


class CommandWarning(_Fault, ABC, Warning):
    """
    base warning: issued through warnings.warn, or rendered in shell mode.
    """

    def __init__(self, message=Unset, /, **options):
        _Fault.__init__(self, message, **options)
        Warning.__init__(self, *([] if message is Unset else [message]))

    def __rich__(self):
        return _render(self, _WARNING_STYLES)

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))
        console.print(self)


class EmptyPrefixWarning(CommandWarning):
    code = FaultCode.EMPTY_PREFIX
    title = "empty prefix"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into a copy of the fault before it is triggered.
    - errors are raised and warnings are warned, unless shell=True, in which
      case both are rendered on stderr through rich.
    """
    if (
        not callable(getattr(fault, "__trigger__", None)) or
        not callable(getattr(fault, "__replace__", None))
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code from __docs__ in __main__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "CommandFault",
    "UsageSyntaxError",
    "ParameterParseError",
    "InvalidParameterFormatError",
    "InvalidParameterValueError",
    "ConverterConfigurationError",
    "MissingConverterError",
    "AmbiguousConverterError",
    "DuplicateConverterError",
    "DuplicateAliasError",
    "DuplicateInterceptorError",
    "RestrictionPolicyError",
    "UnknownRestrictionError",
    "CommandWarning",
    "EmptyPrefixWarning",
    "trigger",
    "getdoc",
)
