"""
Keyword search predicate, described as data.

A SearchPredicate names the join graph of a thread (question, its author, its
answers, their authors) and the OR of substring conditions over it. Backends
compile it: qaboard.search.sql renders SQLAlchemy for the store.

`evaluate` and `matching_roots` below are the reference backend: they run the
same predicate over plain mappings with nested loops, the way the joins are
defined, and the tests hold the SQL backend to their answers. They are not
wired into the request path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence

QUESTION = "question"
QUESTION_AUTHOR = "question_author"
ANSWER = "answer"
ANSWER_AUTHOR = "answer_author"


class JoinKind(str, Enum):
    LEFT = "left"
    INNER = "inner"


@dataclass(frozen=True)
class FieldRef:
    """A column of one relation in the join graph."""

    relation: str
    column: str


@dataclass(frozen=True)
class Join:
    """Brings `target` (an instance of `entity`) in from an already joined `source`.

    `on` pairs a source column with a target column that must be equal.
    """

    source: str
    target: str
    entity: str
    on: tuple[str, str]
    kind: JoinKind = JoinKind.LEFT


@dataclass(frozen=True)
class Contains:
    field: FieldRef
    needle: str


@dataclass(frozen=True)
class AnyOf:
    terms: tuple[Contains, ...]


@dataclass(frozen=True)
class SearchPredicate:
    """Filter over the rows produced by joining `root` with `joins`.

    `distinct` is the requirement that each root record is returned once even
    when several joined rows match.
    """

    root: str
    root_entity: str
    joins: tuple[Join, ...]
    condition: AnyOf
    distinct: bool = True

    @property
    def relations(self) -> tuple[str, ...]:
        return (self.root,) + tuple(join.target for join in self.joins)


THREAD_JOINS = (
    Join(QUESTION, QUESTION_AUTHOR, "user", ("author_id", "id")),
    Join(QUESTION, ANSWER, "answer", ("id", "question_id")),
    Join(ANSWER, ANSWER_AUTHOR, "user", ("author_id", "id")),
)

SEARCH_FIELDS = (
    FieldRef(QUESTION, "subject"),
    FieldRef(QUESTION, "body"),
    FieldRef(QUESTION_AUTHOR, "username"),
    FieldRef(ANSWER, "body"),
    FieldRef(ANSWER_AUTHOR, "username"),
)


def build_search_predicate(keyword: str) -> SearchPredicate:
    """Question search over subject, body, and both sides' author names.

    The keyword is taken literally; an empty keyword matches every question.
    """
    return SearchPredicate(
        root=QUESTION,
        root_entity="question",
        joins=THREAD_JOINS,
        condition=AnyOf(tuple(Contains(field, keyword) for field in SEARCH_FIELDS)),
    )


def evaluate(predicate: SearchPredicate, row: Mapping[str, Mapping[str, Any] | None]) -> bool:
    """Test one joined row. A relation missing from an outer join is None.

    Containment is Python's `in`, so this backend is case-sensitive.
    """
    for term in predicate.condition.terms:
        record = row.get(term.field.relation)
        if record is None:
            continue
        value = record.get(term.field.column)
        if value is not None and term.needle in value:
            return True
    return False


def _joined_rows(
    predicate: SearchPredicate, tables: Mapping[str, Sequence[Mapping[str, Any]]]
) -> Iterator[dict[str, Mapping[str, Any] | None]]:
    rows: list[dict[str, Mapping[str, Any] | None]] = [
        {predicate.root: record} for record in tables.get(predicate.root_entity, ())
    ]
    for join in predicate.joins:
        source_col, target_col = join.on
        expanded = []
        for row in rows:
            source = row.get(join.source)
            matches = []
            if source is not None and source.get(source_col) is not None:
                matches = [
                    record
                    for record in tables.get(join.entity, ())
                    if record.get(target_col) == source[source_col]
                ]
            if matches:
                expanded.extend({**row, join.target: record} for record in matches)
            elif join.kind is JoinKind.LEFT:
                expanded.append({**row, join.target: None})
        rows = expanded
    return iter(rows)


def matching_roots(
    predicate: SearchPredicate, tables: Mapping[str, Sequence[Mapping[str, Any]]]
) -> list[Mapping[str, Any]]:
    """Root records whose joined rows satisfy the predicate, in table order.

    `tables` maps entity names ("question", "answer", "user") to records.
    """
    seen: set[int] = set()
    found = []
    for row in _joined_rows(predicate, tables):
        if not evaluate(predicate, row):
            continue
        root = row[predicate.root]
        if predicate.distinct:
            if id(root) in seen:
                continue
            seen.add(id(root))
        found.append(root)
    return found
