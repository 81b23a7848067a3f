"""
Usage grammar parser.

A usage string describes the parameters a command accepts:

    <name>          placeholder, one whitespace-free value
    <name...>       trailing placeholder, the rest of the input (final term only)
    'text'          literal, matched verbatim
    [ ... ]         optional group
    ( a | b | ... ) alternatives, at least two branches

Whitespace between tokens carries no meaning. Placeholder names are free text up
to the closing '>', so "<coin type>" and "<amount:integer>" are both valid names.

parse() turns a usage string into a commodore.syntax tree or raises
UsageSyntaxError naming the offending position and token.
"""
import logging

from .faults import FaultCode, UsageSyntaxError
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

TRAILING_MARKER = "..."


class Token:
    __slots__ = ("kind", "value", "position")

    def __init__(self, kind, value, position):
        self.kind = kind
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Token({self.kind!r}, {self.value!r}, {self.position})"


def tokenize(usage):
    """
    Split a usage string into tokens.

    Kinds
    - "placeholder", "trailing", "literal" carry their name or text as value.
    - "[", "]", "(", ")", "|" carry the character itself.
    - "end" terminates the stream.
    """
    tokens = []
    index = 0
    length = len(usage)
    while index < length:
        char = usage[index]
        if char.isspace():
            index += 1
        elif char in "[]()|":
            tokens.append(Token(char, char, index))
            index += 1
        elif char == "<":
            closing = usage.find(">", index + 1)
            if closing < 0:
                raise _error(usage, f"Unterminated placeholder starting at position {index}",
                             FaultCode.UNTERMINATED_PLACEHOLDER, index, usage[index:])
            name = usage[index + 1:closing]
            kind = "placeholder"
            if name.endswith(TRAILING_MARKER):
                name = name[:-len(TRAILING_MARKER)]
                kind = "trailing"
            if not name:
                raise _error(usage, f"Placeholder at position {index} has an empty name",
                             FaultCode.EMPTY_NAME, index, usage[index:closing + 1])
            tokens.append(Token(kind, name, index))
            index = closing + 1
        elif char == "'":
            closing = usage.find("'", index + 1)
            if closing < 0:
                raise _error(usage, f"Unterminated literal starting at position {index}",
                             FaultCode.UNTERMINATED_LITERAL, index, usage[index:])
            if closing == index + 1:
                raise _error(usage, f"Literal at position {index} is empty",
                             FaultCode.EMPTY_NAME, index, "''")
            tokens.append(Token("literal", usage[index + 1:closing], index))
            index = closing + 1
        else:
            raise _error(usage, f"Unexpected character {char!r} at position {index}",
                         FaultCode.UNEXPECTED_TOKEN, index, char)
    tokens.append(Token("end", "", length))
    return tokens


def _error(usage, message, code, position, token):
    return UsageSyntaxError(f"{message} in usage string '{usage}'",
                            code=code, usage=usage, position=position, token=token)


class _Parser:
    """recursive descent over the token list of one usage string."""

    def __init__(self, usage):
        self.usage = usage
        self.tokens = tokenize(usage)
        self.index = 0

    @property
    def current(self):
        return self.tokens[self.index]

    def advance(self):
        token = self.tokens[self.index]
        self.index += 1
        return token

    def parse(self):
        if self.current.kind == "end":
            raise _error(self.usage, "Usage must not be empty", FaultCode.EMPTY_USAGE, 0, "")
        expression = self.expression()
        if self.current.kind != "end":
            token = self.current
            raise _error(self.usage, f"Unexpected {token.value!r} at position {token.position}",
                         FaultCode.UNEXPECTED_TOKEN, token.position, token.value)
        return Usage(self.usage, expression)

    def expression(self):
        position = self.current.position
        terms = []
        while self.current.kind not in ("end", "]", ")", "|"):
            terms.append(self.term())
        if not terms:
            token = self.current
            what = "end of usage" if token.kind == "end" else repr(token.value)
            raise _error(self.usage, f"Expected a term but found {what} at position {token.position}",
                         FaultCode.UNEXPECTED_TOKEN, token.position, token.value)
        return terms[0] if len(terms) == 1 else Sequence(terms, position)

    def term(self):
        token = self.advance()
        match token.kind:
            case "placeholder":
                return Placeholder(token.value, token.position)
            case "trailing":
                return TrailingPlaceholder(token.value, token.position)
            case "literal":
                return Literal(token.value, token.position)
            case "[":
                child = self.expression()
                self.close("]", token)
                return Optional(child, token.position)
            case "(":
                branches = [self.expression()]
                while self.current.kind == "|":
                    self.advance()
                    branches.append(self.expression())
                self.close(")", token)
                if len(branches) < 2:
                    raise _error(self.usage,
                                 f"Alternatives at position {token.position} need at least two branches",
                                 FaultCode.SINGLE_ALTERNATIVE, token.position, "(")
                return Alternatives(branches, token.position)
        raise AssertionError(f"unexpected token {token!r}")

    def close(self, kind, opening):
        if self.current.kind != kind:
            raise _error(self.usage,
                         f"Group opened with {opening.value!r} at position {opening.position} is not closed by {kind!r}",
                         FaultCode.UNTERMINATED_GROUP, opening.position, opening.value)
        self.advance()


def _check_trailing(usage, node, final):
    """
    Reject trailing placeholders that are not the last term on their path.

    final tells whether nothing can follow the given node; inside a sequence
    only the last child inherits it, groups pass it on to their children.
    """
    match node:
        case Usage(expression):
            _check_trailing(usage, expression, True)
        case Sequence(children):
            for index, child in enumerate(children):
                _check_trailing(usage, child, final and index == len(children) - 1)
        case Alternatives(branches):
            for branch in branches:
                _check_trailing(usage, branch, final)
        case Optional(child):
            _check_trailing(usage, child, final)
        case TrailingPlaceholder(name) if not final:
            raise _error(usage, f"Placeholder '<{name}{TRAILING_MARKER}>' must be the last term",
                         FaultCode.MISPLACED_TRAILING_PLACEHOLDER, node.position, f"<{name}{TRAILING_MARKER}>")


def parse(usage):
    """
    Parse a usage string into a syntax tree.

    Returns
    - Usage: the root node; str() of it gives the source text back.

    Raises
    - TypeError: when usage is not a string.
    - UsageSyntaxError: empty usage, unterminated tokens or groups, alternatives
      with a single branch, empty names, or a trailing placeholder that is not
      the final term (at most one may exist).
    """
    if not isinstance(usage, str):
        raise TypeError("parse() argument must be a string")
    tree = _Parser(usage).parse()
    _check_trailing(usage, tree, True)
    trailing = [node for node in tree.walk() if isinstance(node, TrailingPlaceholder)]
    if len(trailing) > 1:
        node = trailing[1]
        raise _error(usage, "Only one trailing placeholder may be used",
                     FaultCode.MISPLACED_TRAILING_PLACEHOLDER, node.position, f"<{node.name}{TRAILING_MARKER}>")
    logger.debug("Parsed usage %r into %r", usage, tree)
    return tree


__all__ = (
    "tokenize",
    "parse",
)
