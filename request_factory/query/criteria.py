"""
Criteria trees.

A criteria tree is a tagged variant: a leaf Condition, or an And, Or or
Not group over other nodes. Trees are immutable once built.

The fluent Criteria builder produces trees with left-to-right grouping:

    Criteria.where("a").is_(1).and_("b").gt(2).or_("c").exists()

yields Or(And(a, b), c).
"""

from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Operator(str, Enum):
    """Leaf condition operators."""
    EQUALS = "equals"
    TERM = "term"
    MATCHES = "matches"
    MATCHES_ALL = "matches_all"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EXPRESSION = "expression"
    FUZZY = "fuzzy"
    REGEXP = "regexp"
    LESS = "lt"
    LESS_EQUAL = "lte"
    GREATER = "gt"
    GREATER_EQUAL = "gte"
    BETWEEN = "between"
    IN = "in"
    NOT_IN = "not_in"
    EXISTS = "exists"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"
    WITHIN = "within"
    BOUNDING_BOX = "bounding_box"


class Condition(BaseModel):
    """A single field condition."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["condition"] = "condition"
    field: str
    operator: Operator
    value: Any = None
    boost: Optional[float] = None


class AndGroup(BaseModel):
    """All children must match."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    children: Tuple["CriteriaNode", ...] = ()


class OrGroup(BaseModel):
    """At least one child must match."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    children: Tuple["CriteriaNode", ...] = ()


class NotGroup(BaseModel):
    """The child must not match."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["not"] = "not"
    child: "CriteriaNode"


CriteriaNode = Annotated[
    Union[Condition, AndGroup, OrGroup, NotGroup],
    Field(discriminator="kind"),
]

AndGroup.model_rebuild()
OrGroup.model_rebuild()
NotGroup.model_rebuild()


def combine(left: Optional[Any], connector: str, right: Any) -> Any:
    """
    Join two nodes, extending left when it already is a group of the
    same connector so that mixed chains nest left to right.
    """
    if left is None:
        return right
    if connector == "and":
        if isinstance(left, AndGroup):
            return AndGroup(children=left.children + (right,))
        return AndGroup(children=(left, right))
    if isinstance(left, OrGroup):
        return OrGroup(children=left.children + (right,))
    return OrGroup(children=(left, right))


class FieldCondition:
    """Pending condition on a field; completing it returns the Criteria chain."""

    def __init__(self, chain: "Criteria", field: str, connector: str, negated: bool = False):
        self._chain = chain
        self._field = field
        self._connector = connector
        self._negated = negated

    def not_(self) -> "FieldCondition":
        return FieldCondition(self._chain, self._field, self._connector, not self._negated)

    def _complete(self, operator: Operator, value: Any = None) -> "Criteria":
        node: Any = Condition(field=self._field, operator=operator, value=value)
        if self._negated:
            node = NotGroup(child=node)
        return Criteria(combine(self._chain.node, self._connector, node))

    def is_(self, value: Any) -> "Criteria":
        return self._complete(Operator.EQUALS, value)

    def term(self, value: Any) -> "Criteria":
        return self._complete(Operator.TERM, value)

    def matches(self, value: Any) -> "Criteria":
        return self._complete(Operator.MATCHES, value)

    def matches_all(self, value: Any) -> "Criteria":
        return self._complete(Operator.MATCHES_ALL, value)

    def contains(self, value: str) -> "Criteria":
        return self._complete(Operator.CONTAINS, value)

    def starts_with(self, value: str) -> "Criteria":
        return self._complete(Operator.STARTS_WITH, value)

    def ends_with(self, value: str) -> "Criteria":
        return self._complete(Operator.ENDS_WITH, value)

    def expression(self, value: str) -> "Criteria":
        return self._complete(Operator.EXPRESSION, value)

    def fuzzy(self, value: str) -> "Criteria":
        return self._complete(Operator.FUZZY, value)

    def regexp(self, value: str) -> "Criteria":
        return self._complete(Operator.REGEXP, value)

    def lt(self, value: Any) -> "Criteria":
        return self._complete(Operator.LESS, value)

    def lte(self, value: Any) -> "Criteria":
        return self._complete(Operator.LESS_EQUAL, value)

    def gt(self, value: Any) -> "Criteria":
        return self._complete(Operator.GREATER, value)

    def gte(self, value: Any) -> "Criteria":
        return self._complete(Operator.GREATER_EQUAL, value)

    def between(self, lower: Any, upper: Any) -> "Criteria":
        return self._complete(Operator.BETWEEN, (lower, upper))

    def in_(self, values: Iterable[Any]) -> "Criteria":
        return self._complete(Operator.IN, list(values))

    def not_in(self, values: Iterable[Any]) -> "Criteria":
        return self._complete(Operator.NOT_IN, list(values))

    def exists(self) -> "Criteria":
        return self._complete(Operator.EXISTS)

    def empty(self) -> "Criteria":
        return self._complete(Operator.EMPTY)

    def not_empty(self) -> "Criteria":
        return self._complete(Operator.NOT_EMPTY)

    def within(self, origin: Any, distance: str) -> "Criteria":
        return self._complete(Operator.WITHIN, (origin, distance))

    def bounding_box(self, top_left: Any, bottom_right: Any) -> "Criteria":
        return self._complete(Operator.BOUNDING_BOX, (top_left, bottom_right))


class Criteria:
    """
    Fluent builder for criteria trees.

    Each call returns a new Criteria; existing chains are never changed.
    """

    def __init__(self, node: Optional[Any] = None):
        self.node = node

    @classmethod
    def where(cls, field: str) -> FieldCondition:
        return FieldCondition(cls(), field, "and")

    def and_(self, field: str) -> FieldCondition:
        return FieldCondition(self, field, "and")

    def or_(self, field: str) -> FieldCondition:
        return FieldCondition(self, field, "or")

    def and_criteria(self, other: "Criteria") -> "Criteria":
        """Add a parenthesized sub-chain with AND."""
        if other.node is None:
            return self
        return Criteria(combine(self.node, "and", other.node))

    def or_criteria(self, other: "Criteria") -> "Criteria":
        """Add a parenthesized sub-chain with OR."""
        if other.node is None:
            return self
        return Criteria(combine(self.node, "or", other.node))

    def negate(self) -> "Criteria":
        """Negate the whole chain."""
        if self.node is None:
            return self
        return Criteria(NotGroup(child=self.node))

    def boost(self, boost: float) -> "Criteria":
        """Set the boost of the most recently added condition."""
        return Criteria(_boost_last(self.node, boost))

    def is_empty(self) -> bool:
        return self.node is None


def _boost_last(node: Any, boost: float) -> Any:
    if isinstance(node, Condition):
        return node.model_copy(update={"boost": boost})
    if isinstance(node, NotGroup):
        return NotGroup(child=_boost_last(node.child, boost))
    if isinstance(node, (AndGroup, OrGroup)) and node.children:
        children = node.children[:-1] + (_boost_last(node.children[-1], boost),)
        return node.model_copy(update={"children": children})
    return node
