"""
Usage pattern compiler.

Turns a usage syntax tree into one regular expression plus a table of capture
slots, so that matching a parameter string is a single fullmatch() call.

Matching rules
- consecutive terms are separated by one run of whitespace, none at the start
  or at the end of the (trimmed) parameter string.
- a placeholder captures \\S+, a trailing placeholder captures everything that is
  left including newlines, a literal captures its own text.
- an optional group is tried before it is skipped, alternatives are tried in
  declaration order; the first overall match wins.

Compiled patterns are cached per tree object; compiling the same tree twice
returns the same UsagePattern, while an equal but distinct tree compiles anew.
The cache holds its trees weakly, so dropping a tree also drops its pattern.
"""
import logging
import re
import threading
import weakref
from types import MappingProxyType

from .syntax import (
    Alternatives,
    Literal,
    Optional,
    Placeholder,
    Sequence,
    TrailingPlaceholder,
    Usage,
)

logger = logging.getLogger(__name__)

BOUNDARY = r"(?:\s+|$)"


class Slot:
    """
    One capture group of a compiled usage.

    - name: the placeholder name (type suffix included) or the literal text
    - group: the regex group name
    - literal: True when the slot belongs to a literal
    """
    __slots__ = ("name", "group", "literal")

    def __init__(self, name, group, literal=False):
        self.name = name
        self.group = group
        self.literal = literal

    def __repr__(self):
        return f"Slot({self.name!r}, {self.group!r}, literal={self.literal})"


class UsagePattern:
    """
    Compiled form of a usage: a regex and its ordered capture slots.

    Only the usage source text is kept, never the tree, so the compiler cache
    entry goes away together with its tree.
    """
    __slots__ = ("usage", "regex", "slots", "groups")

    def __init__(self, usage, regex, slots):
        self.usage = str(usage)
        self.regex = regex
        self.slots = tuple(slots)
        groups = {}
        for slot in self.slots:
            groups.setdefault(slot.name, []).append(slot.group)
        self.groups = MappingProxyType({name: tuple(value) for name, value in groups.items()})

    def match(self, parameter_string):
        """
        Match a parameter string against this usage.

        Returns
        - list of (slot, value) pairs for the slots that captured something, in
          slot order, or None when the string does not match the usage.
        """
        match = self.regex.fullmatch(parameter_string.strip())
        if match is None:
            return None
        return [(slot, value) for slot in self.slots if (value := match.group(slot.group)) is not None]

    def __repr__(self):
        return f"UsagePattern({self.usage!r}, {self.regex.pattern!r})"


class _Fragment:
    """regex text of one term; optional fragments keep room for inner boundaries."""
    __slots__ = ("body", "optional", "lead", "trail")

    def __init__(self, body, optional=False):
        self.body = body
        self.optional = optional
        self.lead = ""
        self.trail = ""

    def render(self):
        if self.optional:
            return f"(?:{self.lead}{self.body}{self.trail})?"
        return self.body


class _Compilation:
    """per-tree bookkeeping: group name counters and the slots seen so far."""

    def __init__(self):
        self.counters = {}
        self.slots = []

    def group(self, name, literal):
        sanitized = re.sub(r"[^A-Za-z0-9]", "", name) + ("Literal" if literal else "")
        index = self.counters.get(sanitized, 0)
        self.counters[sanitized] = index + 1
        group = f"_{sanitized}_{index}"
        self.slots.append(Slot(name, group, literal))
        return group

    def fragment(self, node):
        match node:
            case Sequence(children):
                return _Fragment(self.sequence(list(map(self.fragment, children))))
            case Alternatives(branches):
                return _Fragment("(?:" + "|".join(self.fragment(branch).render() for branch in branches) + ")")
            case Optional(child):
                return _Fragment(self.fragment(child).render(), optional=True)
            case Literal(text):
                return _Fragment(f"(?P<{self.group(text, True)}>{re.escape(text)})")
            case TrailingPlaceholder(name):
                return _Fragment(f"(?P<{self.group(name, False)}>.+)")
            case Placeholder(name):
                return _Fragment(rf"(?P<{self.group(name, False)}>\S+)")
        raise TypeError(f"unexpected syntax node {node!r}")

    @staticmethod
    def sequence(fragments):
        """
        Join term fragments with whitespace boundaries.

        A boundary next to an optional term is moved inside it, so that skipping
        the optional also skips its separator: before an optional it becomes the
        optional's leading part, after an optional that has none yet it becomes
        its trailing part.
        """
        parts = []
        previous = None
        for fragment in fragments:
            if previous is not None:
                if previous.optional and not previous.lead:
                    previous.trail = BOUNDARY
                elif fragment.optional:
                    fragment.lead = BOUNDARY
                else:
                    parts.append(_Fragment(BOUNDARY))
            parts.append(fragment)
            previous = fragment
        return "".join(part.render() for part in parts)


class UsagePatternCompiler:
    """
    Compile usage trees to UsagePattern objects, caching one pattern per tree.

    Thread-safe: concurrent compile() calls for the same tree publish exactly
    one pattern. Entries live as long as their tree does.
    """

    def __init__(self):
        self._patterns = weakref.WeakKeyDictionary()
        self._lock = threading.Lock()

    def compile(self, usage):
        if not isinstance(usage, Usage):
            raise TypeError("compile() argument must be a parsed usage")
        if (pattern := self._patterns.get(usage)) is not None:
            return pattern
        with self._lock:
            if (pattern := self._patterns.get(usage)) is None:
                pattern = self._patterns[usage] = self._compile(usage)
        return pattern

    def __len__(self):
        """number of trees currently cached."""
        return len(self._patterns)

    @staticmethod
    def _compile(usage):
        compilation = _Compilation()
        body = compilation.fragment(usage.expression).render()
        pattern = UsagePattern(usage, re.compile(body, re.DOTALL), compilation.slots)
        compilation.counters.clear()
        logger.debug("Compiled usage %r to pattern %r", str(usage), body)
        return pattern


compiler = UsagePatternCompiler()
"""shared compiler used by the parameter parsers unless one is given."""


__all__ = (
    "BOUNDARY",
    "Slot",
    "UsagePattern",
    "UsagePatternCompiler",
    "compiler",
)
