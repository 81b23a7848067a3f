"""
Usage grammar syntax tree.

Nodes are plain immutable objects produced by commodore.grammar.parse() and
consumed by commodore.patterns. They compare by identity and support weak
references: the pattern compiler caches compiled patterns per live tree object,
not per structure.

Node kinds
- Usage: root, holds the source text and the top expression
- Sequence: two or more terms matched one after another
- Alternatives: two or more branches, first matching branch wins
- Optional: a group that may be absent
- Literal: fixed text, captured under its own text as name
- Placeholder: one whitespace-free value
- TrailingPlaceholder: the rest of the input, whitespace and newlines included
"""


class Node:
    __slots__ = ("position", "__weakref__")

    def __init__(self, position=0):
        object.__setattr__(self, "position", position)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__!r} object is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__!r} object is immutable")

    def __iter__(self):
        """yield the direct children of this node."""
        return iter(())

    def walk(self):
        """yield this node and all descendants, depth first, left to right."""
        yield self
        for child in self:
            yield from child.walk()

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(map(repr, self.__rich_repr__()))})"

    def __rich_repr__(self):
        yield from ()


class Usage(Node):
    __slots__ = ("source", "expression")
    __match_args__ = ("expression",)

    def __init__(self, source, expression):
        super().__init__(0)
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "expression", expression)

    def __iter__(self):
        return iter((self.expression,))

    def __str__(self):
        return self.source

    def __rich_repr__(self):
        yield self.expression


class Sequence(Node):
    __slots__ = ("children",)
    __match_args__ = ("children",)

    def __init__(self, children, position=0):
        super().__init__(position)
        object.__setattr__(self, "children", tuple(children))

    def __iter__(self):
        return iter(self.children)

    def __rich_repr__(self):
        yield from self.children


class Alternatives(Node):
    __slots__ = ("branches",)
    __match_args__ = ("branches",)

    def __init__(self, branches, position=0):
        super().__init__(position)
        object.__setattr__(self, "branches", tuple(branches))

    def __iter__(self):
        return iter(self.branches)

    def __rich_repr__(self):
        yield from self.branches


class Optional(Node):
    __slots__ = ("child",)
    __match_args__ = ("child",)

    def __init__(self, child, position=0):
        super().__init__(position)
        object.__setattr__(self, "child", child)

    def __iter__(self):
        return iter((self.child,))

    def __rich_repr__(self):
        yield self.child


class Literal(Node):
    __slots__ = ("text",)
    __match_args__ = ("text",)

    def __init__(self, text, position=0):
        super().__init__(position)
        object.__setattr__(self, "text", text)

    @property
    def name(self):
        return self.text

    def __rich_repr__(self):
        yield self.text


class Placeholder(Node):
    __slots__ = ("name",)
    __match_args__ = ("name",)

    def __init__(self, name, position=0):
        super().__init__(position)
        object.__setattr__(self, "name", name)

    def __rich_repr__(self):
        yield self.name


class TrailingPlaceholder(Placeholder):
    __slots__ = ()


__all__ = (
    "Node",
    "Usage",
    "Sequence",
    "Alternatives",
    "Optional",
    "Literal",
    "Placeholder",
    "TrailingPlaceholder",
)
