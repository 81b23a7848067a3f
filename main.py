import sys

from rich.console import Console
from rich.pretty import pprint

from commodore import *

__prog__ = "commodore-demo"

parser = TypedParameterParser()
console = Console()


@command(usage="[<times:integer>]", description="Answers with pong")
def ping(context):
    times = parser.parse(context).get("times", 1)
    console.print(" ".join(["pong"] * times))


@command(aliases=("say", "echo"), usage="<text...>")
def say(context):
    console.print(parser.parse(context)["text"])


if __name__ == '__main__':
    configure_logging()
    handler = CommandHandler(
        [ping, say],
        reply=lambda context, text: console.print(text, style="bold red", markup=False),
    )

    @handler.listen(CommandNotFoundEvent)
    def unknown(event):
        console.print(f"Unknown command [bold]{event.prefix}{event.alias}[/]")

    for line in sys.stdin:
        outcome, context = handler.handle(line.rstrip("\n"))
        if outcome is not Outcome.EXECUTE:
            pprint(outcome)
