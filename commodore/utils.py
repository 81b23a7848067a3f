"""
Commodore utilities (small shared helpers)

Scope
- Building blocks shared by the grammar, the parameter parsers and the pipeline.
- Re-exported through __all__; anything else in this module is internal.

Overview
- UnsetType / Unset
  • Sentinel for "value not provided", distinct from None (None is a valid prefix,
    alias or command state in a context and must not be confused with "no input").

- coalesce(value, default=None)
  • Replace Unset with a concrete default while preserving None/""/0.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated wrappers (readable tracebacks).

- pluralize(word, count)
  • Tiny English pluralizer for log lines ("1 command", "3 commands").

- split_parameters(text, maximum)
  • Whitespace splitting helper for commands that do not declare a usage.

- mglob(pattern)
  • Module globbing used by plugin discovery ("bot.commands.*", "bot.**.admin").
"""
import builtins
import functools
import importlib
import pkgutil
import re
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Characteristics
    - Boolean-false, printable as "Unset", sealed, one instance per process.
    """

    def __or__(self, other, /):
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
    Return object unless it is Unset, in which case return default.

    Falsey values (None, "", 0) are kept as-is; only Unset is replaced.

    Examples
    - coalesce("!", "?")    -> "!"
    - coalesce(Unset, "?")  -> "?"
    - coalesce(None, "?")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
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


def pluralize(word, count, /):
    """
    Return "<count> <word>" with a naive English plural when count != 1.

    Only the regular endings are handled (s/sh/ch/x/z -> es, consonant+y -> ies),
    which is all the log lines of this package need.
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() first argument must be a string")
    if count == 1:
        return f"{count} {word}"
    lower = word.lower()
    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = word + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = word[:-1] + "ies"
    else:
        plural = word + "s"
    return f"{count} {plural}"


def split_parameters(text, maximum=0, /):
    """
    Split a parameter string at whitespace runs.

    Parameters
    - text: str
      The raw parameter string of a command invocation.
    - maximum: int
      Maximum number of parts; the last part keeps the remaining text verbatim
      (inner whitespace and newlines included). Zero or less means unlimited.

    Returns
    - list[str]: the parts; an empty or whitespace-only text yields [].

    Examples
    - split_parameters("a  b c", 2) -> ["a", "b c"]
    - split_parameters("  ")        -> []
    """
    if not isinstance(text, str):
        raise TypeError("split_parameters() first argument must be a string")
    if not isinstance(maximum, int):
        raise TypeError("split_parameters() second argument must be an integer")
    text = text.strip()
    if not text:
        return []
    if maximum == 1:
        return [text]
    return re.split(r"\s+", text, maxsplit=max(maximum - 1, 0))


@functools.cache
def _resolve_segment(segment):
    """
    translate one glob segment into a regex snippet (dots are never matched).
      *      -> zero or more non-dot chars
      ?      -> one non-dot char
      [...]  -> character class, [!...] negated
      \\x     -> literal x
    """
    length = len(segment)
    index = 0
    parts = []
    while index < length:
        char = segment[index]
        if char == "\\" and index + 1 < length:
            parts.append(re.escape(segment[index + 1]))
            index += 2
            continue
        if char == "*":
            parts.append(r"[^.]*")
        elif char == "?":
            parts.append(r"[^.]")
        elif char == "[":
            start = index + 1
            negated = ""
            if start < length and segment[start] in ("!", "^"):
                negated = "^"
                start += 1
            pivot = start
            while pivot < length and segment[pivot] != "]":
                pivot += 2 if segment[pivot] == "\\" and pivot + 1 < length else 1
            if pivot >= length:
                parts.append(r"\[")
            else:
                parts.append(f"[{negated}{segment[start:pivot]}]")
                index = pivot
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@functools.cache
def _compile_regex(pattern):
    """
    compile a dotted module glob; '**' spans zero or more whole segments.
    """
    parts = []
    for segment in pattern.split("."):
        if segment == "**":
            parts.append(r"(?:\.[A-Za-z_]\w*)*")
        else:
            parts.append(r"\." + _resolve_segment(segment))
    if parts and parts[0].startswith(r"\."):
        parts[0] = parts[0][2:]
    return re.compile("".join(parts))


def mglob(source, /):
    """
    expand a dotted module glob into importable module names.

    rules
    - the pattern must start with at least one concrete package segment.
    - without wildcards the pattern itself is returned.
    - matches are returned sorted; an unimportable root package yields [].

    examples
    - "bot.commands.*"    -> direct children of bot.commands
    - "bot.**.admin"      -> any admin module below bot
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split("."):
        if set(segment) & set("*?[]!\\") or not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    matches = set()
    if (pattern := _compile_regex(source)).fullmatch(prefix):
        matches.add(prefix)
    if hasattr(package, "__path__"):
        for metadata in pkgutil.walk_packages(package.__path__, prefix + "."):
            if pattern.fullmatch(name := metadata.name):
                matches.add(name)
    return sorted(matches)


Unset = UnsetType()
"""
Sentinel for "not provided"; materialize with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "pluralize",
    "split_parameters",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
