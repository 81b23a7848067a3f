"""
Events emitted by the command handler when a message does not lead to a run.

- CommandNotFoundEvent: the message used the prefix (or none was required) but no
  command could be determined. prefix and alias tell what the user typed.
- CommandNotAllowedEvent: a command was found but its restrictions denied it.
"""


class CommandEvent:
    __slots__ = ("context",)

    def __init__(self, context):
        self.context = context

    @property
    def message(self):
        return self.context.message

    def __repr__(self):
        return f"{type(self).__name__}({self.context!r})"


class CommandNotFoundEvent(CommandEvent):
    __slots__ = ("prefix", "alias")

    def __init__(self, context, prefix=None, alias=None):
        super().__init__(context)
        self.prefix = prefix
        self.alias = alias

    def __repr__(self):
        return f"CommandNotFoundEvent(prefix={self.prefix!r}, alias={self.alias!r})"


class CommandNotAllowedEvent(CommandEvent):
    __slots__ = ()

    @property
    def command(self):
        return self.context.command


__all__ = (
    "CommandEvent",
    "CommandNotFoundEvent",
    "CommandNotAllowedEvent",
)
