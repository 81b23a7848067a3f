"""
Command restrictions.

A restriction decides whether a command may run for a given context. Commands
name restriction classes; the handler resolves them to instances through a
RestrictionLookup when the command is about to execute, so restrictions can be
configured (and hold state) independently of the commands using them.

Combination
- RestrictionChainElement wraps a restriction class and combines with & (and),
  | (or) and ~ (not), short-circuiting left to right.
- AllOf / AnyOf / NoneOf are restriction base classes aggregating restriction
  instances given at construction.
- RestrictionPolicy tells how the restrictions listed on a command combine.
"""
import enum
import logging
from abc import ABC, abstractmethod

from .faults import RestrictionPolicyError, UnknownRestrictionError

logger = logging.getLogger(__name__)


class Restriction(ABC):

    @abstractmethod
    def allow_command(self, context):
        """return True when the command in context may be executed."""


class Everyone(Restriction):
    """allows every command."""

    def allow_command(self, context):
        return True


class _Aggregate(Restriction):

    def __init__(self, *restrictions):
        if not all(isinstance(restriction, Restriction) for restriction in restrictions):
            raise TypeError(f"{type(self).__name__}() arguments must be restrictions")
        self.restrictions = restrictions


class AllOf(_Aggregate):
    def allow_command(self, context):
        return all(restriction.allow_command(context) for restriction in self.restrictions)


class AnyOf(_Aggregate):
    def allow_command(self, context):
        return any(restriction.allow_command(context) for restriction in self.restrictions)


class NoneOf(_Aggregate):
    def allow_command(self, context):
        return not any(restriction.allow_command(context) for restriction in self.restrictions)


class RestrictionLookup:
    """
    Restriction instances by class. Everyone is always available.
    """

    def __init__(self, restrictions=()):
        self._restrictions = {Everyone: Everyone()}
        for restriction in restrictions:
            self.add(restriction)

    def add(self, restriction, /):
        if not isinstance(restriction, Restriction):
            raise TypeError("add() argument must be a restriction instance")
        self._restrictions[type(restriction)] = restriction
        return restriction

    def __getitem__(self, cls):
        try:
            return self._restrictions[cls]
        except KeyError:
            raise UnknownRestrictionError(
                f"Restriction {cls.__qualname__!r} is not registered",
                restriction=cls,
            ) from None

    def __contains__(self, cls):
        return cls in self._restrictions


class RestrictionChainElement:
    """
    Node of a boolean expression over restriction classes.
    """

    def __init__(self, restriction=None, /):
        if restriction is not None and not (isinstance(restriction, type) and issubclass(restriction, Restriction)):
            raise TypeError("RestrictionChainElement() argument must be a restriction class")
        self.restriction = restriction

    def is_command_allowed(self, lookup, context):
        return lookup[self.restriction].allow_command(context)

    def __and__(self, other):
        return _And(self, _element(other))

    def __or__(self, other):
        return _Or(self, _element(other))

    def __invert__(self):
        return _Not(self)

    def __repr__(self):
        return self.restriction.__qualname__


class _And(RestrictionChainElement):
    def __init__(self, left, right):
        super().__init__()
        self.left, self.right = left, right

    def is_command_allowed(self, lookup, context):
        return self.left.is_command_allowed(lookup, context) and self.right.is_command_allowed(lookup, context)

    def __repr__(self):
        return f"({self.left!r} & {self.right!r})"


class _Or(RestrictionChainElement):
    def __init__(self, left, right):
        super().__init__()
        self.left, self.right = left, right

    def is_command_allowed(self, lookup, context):
        return self.left.is_command_allowed(lookup, context) or self.right.is_command_allowed(lookup, context)

    def __repr__(self):
        return f"({self.left!r} | {self.right!r})"


class _Not(RestrictionChainElement):
    def __init__(self, element):
        super().__init__()
        self.element = element

    def is_command_allowed(self, lookup, context):
        return not self.element.is_command_allowed(lookup, context)

    def __repr__(self):
        return f"~{self.element!r}"


def _element(object):
    if isinstance(object, RestrictionChainElement):
        return object
    return RestrictionChainElement(object)


class RestrictionPolicy(enum.Enum):
    ALL_OF = "all of"
    ANY_OF = "any of"
    NONE_OF = "none of"


def chain(restrictions, policy=None, /):
    """
    Build the restriction chain of a command.

    - no restrictions: Everyone
    - one restriction: that restriction, negated under NONE_OF
    - several: combined per policy; a missing policy is a RestrictionPolicyError
    """
    elements = [_element(restriction) for restriction in restrictions]
    if policy is not None and not isinstance(policy, RestrictionPolicy):
        raise TypeError("chain() policy must be a RestrictionPolicy")
    if not elements:
        return RestrictionChainElement(Everyone)
    if len(elements) > 1 and policy is None:
        raise RestrictionPolicyError(
            f"Multiple restrictions {elements!r} given without a restriction policy"
        )
    first, *rest = elements
    match policy:
        case RestrictionPolicy.ALL_OF | None:
            result = first
            for element in rest:
                result = result & element
        case RestrictionPolicy.ANY_OF:
            result = first
            for element in rest:
                result = result | element
        case RestrictionPolicy.NONE_OF:
            result = ~first
            for element in rest:
                result = result & ~element
    return result


__all__ = (
    "Restriction",
    "Everyone",
    "AllOf",
    "AnyOf",
    "NoneOf",
    "RestrictionLookup",
    "RestrictionChainElement",
    "RestrictionPolicy",
    "chain",
)
