"""
SQLAlchemy backend for SearchPredicate.
Design: Every join is rendered as written (outer joins stay outer) and the OR of
`LIKE '%' || :kw || '%'` terms becomes the WHERE clause. The keyword is not
escaped, so `%` and `_` keep their wildcard meaning.
"""

from sqlalchemy import Select, distinct, false, func, or_, select
from sqlalchemy.orm import aliased

from qaboard.db.models import Answer, Question, User
from qaboard.search.predicate import FieldRef, JoinKind, SearchPredicate

ENTITIES = {"question": Question, "answer": Answer, "user": User}


class CompiledSearch:
    """Statements for one predicate: the row SELECT and the matching COUNT."""

    def __init__(self, predicate: SearchPredicate):
        self.predicate = predicate
        self.root = ENTITIES[predicate.root_entity]
        self.aliases = {predicate.root: self.root}
        for join in predicate.joins:
            self.aliases[join.target] = aliased(ENTITIES[join.entity], name=join.target)

    def column(self, ref: FieldRef):
        return getattr(self.aliases[ref.relation], ref.column)

    def criterion(self):
        terms = [self.column(term.field).contains(term.needle) for term in self.predicate.condition.terms]
        return or_(*terms) if terms else false()

    def apply(self, stmt: Select) -> Select:
        """Add the join graph and WHERE clause to a statement rooted at the root entity."""
        for join in self.predicate.joins:
            source = self.aliases[join.source]
            target = self.aliases[join.target]
            source_col, target_col = join.on
            onclause = getattr(source, source_col) == getattr(target, target_col)
            stmt = stmt.join(target, onclause, isouter=join.kind is JoinKind.LEFT)
        return stmt.where(self.criterion())

    def rows(self) -> Select:
        stmt = self.apply(select(self.root))
        if self.predicate.distinct:
            stmt = stmt.distinct()
        return stmt

    def count(self) -> Select:
        key = self.root.id
        counted = func.count(distinct(key)) if self.predicate.distinct else func.count(key)
        return self.apply(select(counted).select_from(self.root))
