"""
Typed predicate tree handed from the query builder to the data store.

Every node carries an ``op`` tag so a tree survives a JSON round trip:

    And(clauses=[Equals(field="is_active", value=True),
                 Or(clauses=[Equals(field="service_type", value="groomer"),
                             Contains(field="name", value="groomer")])])

An empty ``And`` matches every row and an empty ``Or`` matches none.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

Scalar = str | bool | int | float


class Equals(BaseModel):
    op: Literal["equals"] = "equals"
    field: str
    value: Scalar
    ignore_case: bool = True


class Contains(BaseModel):
    """Case-insensitive substring; on list fields any element may match."""

    op: Literal["contains"] = "contains"
    field: str
    value: str


class Range(BaseModel):
    op: Literal["range"] = "range"
    field: str
    gte: float | None = None
    lte: float | None = None


class In(BaseModel):
    op: Literal["in"] = "in"
    field: str
    values: list[Scalar]


class And(BaseModel):
    op: Literal["and"] = "and"
    clauses: list[Predicate] = Field(default_factory=list)


class Or(BaseModel):
    op: Literal["or"] = "or"
    clauses: list[Predicate] = Field(default_factory=list)


Predicate = Annotated[
    Union[Equals, Contains, Range, In, And, Or],
    Field(discriminator="op"),
]

And.model_rebuild()
Or.model_rebuild()


class SortKey(BaseModel):
    field: str
    descending: bool = False


class StoreQuery(BaseModel):
    where: Predicate
    order_by: list[SortKey] = Field(default_factory=list)
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    # Distance is not indexed; the formatter sorts by it after retrieval
    sort_by_distance: bool = False


def all_of(*clauses: Predicate) -> And:
    """``And`` over the given clauses, inlining nested ``And`` nodes."""
    flat: list[Predicate] = []
    for clause in clauses:
        if isinstance(clause, And):
            flat.extend(clause.clauses)
        else:
            flat.append(clause)
    return And(clauses=flat)


def any_of(*clauses: Predicate) -> Or:
    return Or(clauses=list(clauses))
