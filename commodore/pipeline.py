"""
Command resolution pipeline.

Every incoming message is wrapped into a CommandContext and moved through six
phases, in order:

    BEFORE_PREFIX -> (prefix computation) -> AFTER_PREFIX
    BEFORE_ALIAS_AND_PARAMS -> (alias computation) -> AFTER_ALIAS_AND_PARAMS
    BEFORE_COMMAND -> (command lookup) -> AFTER_COMMAND

At most one interceptor runs in each phase and may return a modified context.
A default computation only fills in what is still missing, and whatever an
interceptor already set short-circuits the phases that would compute it:

- a context carrying a command goes straight to execution;
- a context carrying an alias skips to BEFORE_COMMAND;
- a context carrying a prefix skips to BEFORE_ALIAS_AND_PARAMS.

Resolution ends in one of the Outcome values. NOT_FOUND and NOT_ALLOWED notify
the listeners registered through CommandHandler.listen(); IGNORED (the message does
not start with the prefix) is silent. Non-matching messages never raise.
"""
import enum
import logging
import threading
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from .commands import CommandRegistry
from .context import CommandContext
from .events import CommandEvent, CommandNotAllowedEvent, CommandNotFoundEvent
from .faults import DuplicateInterceptorError, EmptyPrefixWarning, ParameterParseError, trigger
from .restrictions import RestrictionLookup
from .utils import Unset, coalesce, pluralize, rename, split_parameters

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"


class Phase(enum.IntEnum):
    BEFORE_PREFIX = 1
    AFTER_PREFIX = 2
    BEFORE_ALIAS_AND_PARAMS = 3
    AFTER_ALIAS_AND_PARAMS = 4
    BEFORE_COMMAND = 5
    AFTER_COMMAND = 6


class Outcome(enum.Enum):
    EXECUTE = "execute"
    NOT_FOUND = "not found"
    IGNORED = "ignored"
    NOT_ALLOWED = "not allowed"


Resolution = namedtuple("Resolution", ("outcome", "context"))

_DESCRIPTIONS = {
    Phase.BEFORE_PREFIX: "before prefix computation",
    Phase.AFTER_PREFIX: "after prefix computation",
    Phase.BEFORE_ALIAS_AND_PARAMS: "before alias and parameter string computation",
    Phase.AFTER_ALIAS_AND_PARAMS: "after alias and parameter string computation",
    Phase.BEFORE_COMMAND: "before command computation",
    Phase.AFTER_COMMAND: "after command computation",
}


def default_prefix_provider(message):
    """prefix provider used when none is configured: always "!"."""
    return DEFAULT_PREFIX


class InterceptorRegistry:
    """
    One interceptor per phase.

    An interceptor is a callable (context, phase) -> context. Registering a second
    interceptor for a phase raises DuplicateInterceptorError; hosts needing several
    must compose them into one.
    """

    def __init__(self):
        self._interceptors = {}
        self._lock = threading.Lock()

    def register(self, interceptor, /, *phases):
        if not callable(interceptor):
            raise TypeError("register() first argument must be callable")
        if not phases or not all(isinstance(phase, Phase) for phase in phases):
            raise TypeError("register() requires at least one Phase")
        with self._lock:
            for phase in phases:
                if (other := self._interceptors.get(phase)) is not None:
                    raise DuplicateInterceptorError(
                        f"Interceptor {other!r} is already registered for phase {phase.name}, "
                        f"compose it with {interceptor!r} instead",
                        phase=phase,
                    )
            self._interceptors = self._interceptors | dict.fromkeys(phases, interceptor)
        return interceptor

    def intercept(self, *phases):
        """decorator form of register()."""
        @rename("intercept")
        def wrapper(interceptor):
            return self.register(interceptor, *phases)
        return wrapper

    def get(self, phase, /):
        return self._interceptors.get(phase)

    def __contains__(self, phase):
        return phase in self._interceptors


def _forward(context, nominal):
    if context.command is not None:
        return Outcome.EXECUTE
    if context.alias is not None and nominal < Phase.BEFORE_COMMAND:
        return Phase.BEFORE_COMMAND
    if context.prefix is not None and nominal < Phase.BEFORE_ALIAS_AND_PARAMS:
        return Phase.BEFORE_ALIAS_AND_PARAMS
    return nominal


class CommandHandler:
    """
    Resolves messages to commands and runs them.

    Parameters
    - commands: CommandRegistry or iterable of Command instances
    - prefix: str or prefix provider callable (message) -> str, default "!"
    - interceptors: InterceptorRegistry
    - restrictions: Restriction instances (Everyone is always known)
    - extract: callable (message) -> message text, default str
    - reply: callable (context, text), used to report parameter parse failures
    - workers: maximum worker threads for asynchronous commands
    - shell: render warnings on stderr instead of issuing them through warnings
    """

    def __init__(self, commands=(), *, prefix=Unset, interceptors=Unset, restrictions=(),
                 extract=str, reply=Unset, workers=Unset, shell=False):
        self.commands = commands if isinstance(commands, CommandRegistry) else CommandRegistry(commands)
        prefix = coalesce(prefix, default_prefix_provider)
        if isinstance(prefix, str):
            self.prefix_provider = rename(lambda message: prefix, "prefix_provider")
        elif callable(prefix):
            self.prefix_provider = prefix
        else:
            raise TypeError("CommandHandler() prefix must be a string or a callable")
        self.interceptors = coalesce(interceptors, None) or InterceptorRegistry()
        self.restrictions = RestrictionLookup(restrictions)
        self.extract = extract
        self.reply = coalesce(reply, None)
        self.shell = shell
        self._workers = coalesce(workers, None)
        self._executor = None
        self._executor_lock = threading.Lock()
        self._listeners = []
        logger.info("Got %s registered", pluralize("command", len(self.commands)))

    def listen(self, event_type=CommandEvent, /):
        """decorator registering a listener for events of event_type."""
        if not (isinstance(event_type, type) and issubclass(event_type, CommandEvent)):
            raise TypeError("listen() argument must be a CommandEvent subclass")

        @rename("listen")
        def wrapper(listener):
            self._listeners.append((event_type, listener))
            return listener
        return wrapper

    def _notify(self, event):
        for event_type, listener in list(self._listeners):
            if isinstance(event, event_type):
                listener(event)

    def handle(self, message, /):
        """
        Resolve a message and execute the command it names.

        Returns
        - Resolution(outcome, context) with the final context.
        """
        return self.handle_context(CommandContext(message, self.extract(message)))

    def handle_context(self, context, /):
        """like handle(), starting from a prepared (possibly partially filled) context."""
        logger.debug("Handle message for %r", context)
        outcome, context = self.resolve(context)
        match outcome:
            case Outcome.EXECUTE:
                if not context.command.restriction_chain.is_command_allowed(self.restrictions, context):
                    logger.debug("Command %r was not allowed by restrictions", context.command)
                    self._notify(CommandNotAllowedEvent(context))
                    return Resolution(Outcome.NOT_ALLOWED, context)
                self.execute(context)
            case Outcome.NOT_FOUND:
                self._notify(self._not_found(context))
        return Resolution(outcome, context)

    def resolve(self, context, /):
        """
        Run the phases over a context without executing anything.

        Returns
        - (Outcome, final context); the outcome is never NOT_ALLOWED.
        """
        state = _forward(context, Phase.BEFORE_PREFIX)
        while isinstance(state, Phase):
            context, state = self._step(state, context)
        logger.debug("Resolved to %s for %r", state.name, context)
        return state, context

    def _step(self, phase, context):
        match phase:
            case Phase.BEFORE_PREFIX:
                logger.debug("Entering prefix computation phase for %r", context)
                context = self._intercept(phase, context)
                return context, _forward(context, Phase.AFTER_PREFIX)

            case Phase.AFTER_PREFIX:
                if context.prefix is None:
                    context = context.with_prefix(self.prefix_provider(context.message))
                context = self._intercept(phase, context)
                state = _forward(context, Phase.BEFORE_ALIAS_AND_PARAMS)
                if state is Phase.BEFORE_ALIAS_AND_PARAMS and context.prefix is None:
                    logger.debug("No matching command found (prefix missing)")
                    return context, Outcome.NOT_FOUND
                return context, state

            case Phase.BEFORE_ALIAS_AND_PARAMS:
                logger.debug("Entering alias and parameter string computation phase for %r", context)
                context = self._intercept(phase, context)
                state = _forward(context, Phase.AFTER_ALIAS_AND_PARAMS)
                if state is not Phase.AFTER_ALIAS_AND_PARAMS:
                    return context, state
                if context.prefix is None:
                    logger.debug("No matching command found (prefix missing)")
                    return context, Outcome.NOT_FOUND
                if not context.prefix:
                    trigger(EmptyPrefixWarning(
                        "The command prefix is empty, every message is parsed as a possible command, "
                        "which can hurt performance",
                        hint="configure a non-empty prefix or ignore unwanted messages in an interceptor",
                    ), shell=self.shell)
                if not context.message_content.startswith(context.prefix):
                    logger.debug("Message content does not start with prefix, ignoring message")
                    return context, Outcome.IGNORED
                return context, state

            case Phase.AFTER_ALIAS_AND_PARAMS:
                if context.alias is None:
                    found = self.commands.match(context.message_content[len(context.prefix):])
                    if found is not None:
                        alias, parameter_string = found
                        context = context.with_alias(alias).with_parameter_string(parameter_string)
                context = self._intercept(phase, context)
                state = _forward(context, Phase.BEFORE_COMMAND)
                if state is Phase.BEFORE_COMMAND and context.alias is None:
                    logger.debug("No matching command found (alias missing)")
                    return context, Outcome.NOT_FOUND
                return context, state

            case Phase.BEFORE_COMMAND:
                logger.debug("Entering command computation phase for %r", context)
                context = self._intercept(phase, context)
                state = _forward(context, Phase.AFTER_COMMAND)
                if state is Phase.AFTER_COMMAND and context.alias is None:
                    logger.debug("No matching command found (alias missing)")
                    return context, Outcome.NOT_FOUND
                return context, state

            case Phase.AFTER_COMMAND:
                if context.command is None:
                    context = context.with_command(self.commands.get(context.alias))
                context = self._intercept(phase, context)
                if context.command is None:
                    logger.debug("No matching command found (command missing)")
                    return context, Outcome.NOT_FOUND
                return context, Outcome.EXECUTE

    def _intercept(self, phase, context):
        interceptor = self.interceptors.get(phase)
        if interceptor is None:
            return context
        logger.debug("Calling %s interceptor for %r", _DESCRIPTIONS[phase], context)
        result = interceptor(context, phase)
        if not isinstance(result, CommandContext):
            raise TypeError(f"interceptor {interceptor!r} must return a CommandContext, not {type(result).__name__}")
        logger.debug("%s interceptor result is %r", _DESCRIPTIONS[phase].capitalize(), result)
        return result

    def _not_found(self, context):
        alias = context.alias
        prefix = context.prefix
        if alias is None and prefix is not None and context.message_content.startswith(prefix):
            words = split_parameters(context.message_content[len(prefix):], 2)
            alias = words[0] if words else None
        return CommandNotFoundEvent(context, prefix, alias)

    def execute(self, context, /):
        """run the command of a resolved context, on a worker thread when asynchronous."""
        command = context.command
        if not command.asynchronous:
            return self._run(context)
        future = self.executor.submit(self._run, context)
        future.add_done_callback(_log_failure)
        return future

    def _run(self, context):
        try:
            return context.command.execute(context)
        except ParameterParseError as error:
            if self.reply is None:
                logger.warning("Unreported parameter parse failure for %r: %s", context.command, error)
                return None
            return self.reply(context, str(error))

    @property
    def executor(self):
        """lazily created thread pool for asynchronous commands."""
        if self._executor is None:
            with self._executor_lock:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(self._workers, thread_name_prefix="commodore")
        return self._executor

    def shutdown(self, wait=True):
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exception):
        self.shutdown()


def _log_failure(future):
    if not future.cancelled() and (error := future.exception()) is not None:
        logger.error("Exception while executing command asynchronously", exc_info=error)


__all__ = (
    "DEFAULT_PREFIX",
    "Phase",
    "Outcome",
    "Resolution",
    "default_prefix_provider",
    "InterceptorRegistry",
    "CommandHandler",
)
