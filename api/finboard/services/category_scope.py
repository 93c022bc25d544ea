"""
Category scope resolution.

Categories form a two-level tree: top-level parents and their direct
children. A budget scoped to a category counts spending tagged with that
category or any of its direct children; a budget with no category counts
only uncategorized spending.
"""
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryScope:
    """Either a closed set of category ids, or (category_ids=None) uncategorized-only."""
    category_ids: frozenset[int] | None = None

    @property
    def is_uncategorized(self) -> bool:
        return self.category_ids is None

    def matches(self, category_id: int | None) -> bool:
        if self.category_ids is None:
            return category_id is None
        return category_id in self.category_ids


UNCATEGORIZED = CategoryScope()


def resolve_scope(category_id: int | None, child_ids: Iterable[int] = ()) -> CategoryScope:
    if category_id is None:
        return UNCATEGORIZED
    return CategoryScope(frozenset([category_id, *child_ids]))


class CategoryTree:
    """Flat arena of (id, parent_id) pairs with a one-level children index."""

    def __init__(self, nodes: Iterable[tuple[int, int | None]]):
        self._parent_of: dict[int, int | None] = {}
        children: dict[int, list[int]] = defaultdict(list)
        for cat_id, parent_id in nodes:
            self._parent_of[cat_id] = parent_id
            if parent_id is not None:
                children[parent_id].append(cat_id)
        self._children_of = {k: tuple(sorted(v)) for k, v in children.items()}

    @classmethod
    def from_categories(cls, categories: Iterable) -> "CategoryTree":
        return cls((c.id, c.parent_id) for c in categories)

    def __contains__(self, category_id: int) -> bool:
        return category_id in self._parent_of

    def parent_of(self, category_id: int) -> int | None:
        return self._parent_of.get(category_id)

    def children_of(self, category_id: int) -> tuple[int, ...]:
        return self._children_of.get(category_id, ())

    def depth_of(self, category_id: int) -> int:
        """1 for a top-level category, 2 for a child; unknown ids count as top-level."""
        return 1 if self.parent_of(category_id) is None else 2

    def scope_for(self, category_id: int | None) -> CategoryScope:
        if category_id is None:
            return UNCATEGORIZED
        return resolve_scope(category_id, self.children_of(category_id))
