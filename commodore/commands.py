"""
Commands and the command registry.

Scope
- Command: base class of chat commands. Metadata (aliases, description, usage,
  asynchronous flag, restrictions and their policy) is plain class attributes,
  completed once when the subclass is created:
  • aliases default to the class name without a Command/Cmd prefix or suffix and
    with a lowercase first letter (PingCommand -> "ping", CmdRoll -> "roll").
  • description defaults to the first line of the class docstring.
  • usage is parsed right away, so a malformed usage fails at import time.
  • restrictions + policy are folded into restriction_chain.
- command(): decorator/factory turning a plain function into a Command instance.
- CommandRegistry: alias to command table with duplicate detection, the alias
  matcher used by the pipeline, and plugin discovery through include().

Examples
    >>> class PingCommand(Command):
    ...     \"\"\"Answers with pong.\"\"\"
    ...     def execute(self, context):
    ...         ...
    >>> PingCommand.aliases, PingCommand.description
    (('ping',), 'Answers with pong.')

    >>> @command(usage="<sides:integer>")
    ... def roll(context):
    ...     ...
"""
import importlib
import inspect
import logging
import re
import threading
from abc import ABC, abstractmethod

from . import grammar
from .faults import DuplicateAliasError
from .restrictions import chain
from .utils import Unset, coalesce, mglob, pluralize, rename

logger = logging.getLogger(__name__)


def default_alias(name, /):
    """
    Derive an alias from a class or function name.

    Examples
    - "PingCommand"  -> "ping"
    - "CmdRoll"      -> "roll"
    - "coin_cmd"     -> "coin"
    - "HelpMe"       -> "helpMe"
    """
    if not isinstance(name, str):
        raise TypeError("default_alias() argument must be a string")
    stripped = re.sub(r"(?i)^(?:command|cmd)_?|_?(?:command|cmd)$", "", name) or name
    return stripped[:1].lower() + stripped[1:]


def _aliases(aliases, owner):
    if isinstance(aliases, str):
        aliases = (aliases,)
    aliases = tuple(dict.fromkeys(aliases))
    if not aliases or not all(isinstance(alias, str) and alias and not alias.isspace() for alias in aliases):
        raise TypeError(f"{owner} aliases must be non-empty strings")
    return aliases


def _label(callback):
    return getattr(callback, "__qualname__", None) or repr(callback)


def _summary(docstring):
    if not docstring:
        return None
    return inspect.cleandoc(docstring).partition("\n")[0] or None


class Command(ABC):
    """
    Base class of chat commands.

    Subclasses implement execute(context); context.command is the instance itself
    and context.parameter_string holds the raw arguments.
    """
    aliases = ()
    description = None
    usage = None
    asynchronous = False
    restrictions = ()
    policy = None
    restriction_chain = chain(())

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        if "aliases" in cls.__dict__:
            cls.aliases = _aliases(cls.aliases, cls.__qualname__)
        else:
            cls.aliases = (default_alias(cls.__name__),)
        if "description" not in cls.__dict__:
            cls.description = _summary(cls.__dict__.get("__doc__"))
        if cls.usage is not None:
            grammar.parse(cls.usage)
        cls.restriction_chain = chain(cls.restrictions, cls.policy)

    @abstractmethod
    def execute(self, context):
        """run the command for a resolved context."""

    def __repr__(self):
        return f"<{type(self).__qualname__} aliases={self.aliases!r}>"


class _CallbackCommand(Command):

    def __init__(self, callback, /, *, aliases=Unset, description=Unset, usage=None,
                 asynchronous=False, restrictions=(), policy=None):
        self.callback = callback
        name = getattr(callback, "__name__", None)
        if aliases is Unset:
            if name is None:
                raise TypeError(f"command() needs aliases for unnamed callable {callback!r}")
            aliases = default_alias(name)
        self.aliases = _aliases(aliases, _label(callback))
        if description is Unset:
            # partial objects and the like only carry their type's docstring
            description = _summary(callback.__doc__) if name is not None else None
        self.description = description
        self.usage = usage
        self.asynchronous = asynchronous
        self.restrictions = tuple(restrictions)
        self.policy = policy
        if usage is not None:
            grammar.parse(usage)
        self.restriction_chain = chain(self.restrictions, policy)

    def execute(self, context):
        return self.callback(context)

    def __repr__(self):
        return f"<command {_label(self.callback)} aliases={self.aliases!r}>"


def command(callback=Unset, /, **options):
    """
    Build a Command from a function taking the context.

    Forms
    - @command
    - @command(aliases=("coin", "flip"), usage="[<times:integer>]", asynchronous=True)
    - command(function, **options)

    Options
    - aliases: str or iterable of str (default derived from the function name)
    - description: str (default first docstring line)
    - usage: usage string or None
    - asynchronous: bool
    - restrictions: restriction classes; policy: RestrictionPolicy
    """
    if callback is Unset:
        @rename("command")
        def wrapper(callback):
            return command(callback, **options)
        return wrapper
    if not callable(callback):
        raise TypeError("command() argument must be callable")
    return _CallbackCommand(callback, **options)


class CommandRegistry:
    """
    Alias to command table.

    Parameters
    - commands: initial commands
    - converters: ConverterRegistry; when given, typed usages are checked at
      registration for missing or ambiguous converters
    - message_type: message class used for that check
    """

    def __init__(self, commands=(), *, converters=Unset, message_type=object):
        self._commands = {}
        self._matcher = re.compile(r"(?!)")
        self._lock = threading.Lock()
        self.converters = coalesce(converters, None)
        self.message_type = message_type
        for object in commands:
            self.add(object)

    def add(self, command, /):
        """
        Register a command under all of its aliases.

        Raises
        - TypeError: not a Command instance.
        - UsageSyntaxError: malformed usage.
        - DuplicateAliasError: an alias is already taken by another command.
        - MissingConverterError / AmbiguousConverterError: see ConverterRegistry.check().
        """
        if not isinstance(command, Command):
            raise TypeError("add() argument must be a Command instance")
        if command.usage is not None:
            tree = grammar.parse(command.usage)
            if self.converters is not None:
                self.converters.check(tree, self.message_type)
        with self._lock:
            commands = dict(self._commands)
            for alias in command.aliases:
                if (other := commands.get(alias)) is not None and other is not command:
                    raise DuplicateAliasError(
                        f"The same alias was defined for the two commands '{other!r}' and '{command!r}'",
                        alias=alias,
                    )
                commands[alias] = command
            self._commands = commands
            self._matcher = _matcher(commands)
        logger.debug("Registered command %r", command)
        return command

    def include(self, source, /):
        """
        Import the modules matched by a module glob and register the commands they
        define: top-level Command instances and concrete Command subclasses
        defined in the module itself.

        Returns
        - list of the registered commands.
        """
        if not isinstance(source, str):
            raise TypeError("include() argument must be a string")
        found = []
        for name in mglob(source):
            try:
                module = importlib.import_module(name)
            except ImportError:
                raise TypeError(f"unable to import module {name!r}") from None
            for _, object in inspect.getmembers(module):
                if isinstance(object, Command):
                    found.append(object)
                elif (
                    isinstance(object, type) and issubclass(object, Command) and
                    object.__module__ == module.__name__ and not inspect.isabstract(object)
                ):
                    found.append(object())
        for object in found:
            if object not in self:
                self.add(object)
        logger.info("Got %s from %r", pluralize("command", len(found)), source)
        return found

    def __contains__(self, object):
        if isinstance(object, Command):
            return any(command is object for command in self._commands.values())
        return object in self._commands

    def __getitem__(self, alias):
        return self._commands[alias]

    def get(self, alias, default=None, /):
        return self._commands.get(alias, default)

    def __iter__(self):
        return iter(list({id(command): command for command in self._commands.values()}.values()))

    def __len__(self):
        return len({id(command) for command in self._commands.values()})

    @property
    def aliases(self):
        return tuple(self._commands)

    def match(self, text, /):
        """
        Split text (message content after the prefix) into alias and parameter string.

        The text is trimmed; the alias must be followed by whitespace or the end,
        longer aliases win over their prefixes. Returns (alias, parameter_string)
        or None.
        """
        match = self._matcher.match(text.strip())
        if match is None:
            return None
        return match.group("alias"), match.group("parameters")


def _matcher(commands):
    aliases = sorted(commands, key=lambda alias: (-len(alias), alias))
    return re.compile(
        r"(?P<alias>" + "|".join(map(re.escape, aliases)) + r")(?=\s|$)\s*(?P<parameters>.*)",
        re.DOTALL,
    )


__all__ = (
    "Command",
    "command",
    "default_alias",
    "CommandRegistry",
)
