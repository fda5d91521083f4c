"""Category aggregate: a node in the product category tree.

A category holds the id of its parent, never the parent itself, so moving a
subtree touches only the categories in it. ``level`` is the distance from the
root and is kept in step by whoever moves the category.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from storefront.catalogue.events import CategoryCreated, CategoryMoved, CategoryUpdated
from storefront.domain import storefront

MAX_CATEGORY_LEVEL = 4


def _check_level(level):
    if level > MAX_CATEGORY_LEVEL:
        raise ValidationError(
            {"parent_category_id": [f"Categories can be nested at most {MAX_CATEGORY_LEVEL + 1} levels deep"]}
        )


@storefront.aggregate
class Category:
    name = String(required=True, max_length=100)
    description = Text()
    parent_category_id = Identifier()
    level = Integer(default=0, min_value=0, max_value=MAX_CATEGORY_LEVEL)
    display_order = Integer(default=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, description=None, parent=None, display_order=0):
        level = parent.level + 1 if parent is not None else 0
        _check_level(level)

        now = datetime.now(UTC)
        category = cls(
            name=name,
            description=description,
            parent_category_id=str(parent.id) if parent is not None else None,
            level=level,
            display_order=display_order or 0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=str(category.id),
                name=name,
                parent_category_id=category.parent_category_id,
                level=level,
            )
        )
        return category

    @property
    def is_root(self) -> bool:
        return not self.parent_category_id

    def update_details(self, **changes):
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(CategoryUpdated(category_id=str(self.id), name=self.name, is_active=self.is_active))

    def move_under(self, parent, subtree_depth=0):
        """Re-parent this category; ``parent`` None makes it a root.

        ``subtree_depth`` is how many levels of descendants hang below this
        category, so the deepest of them stays within the level limit.
        """
        if parent is not None and str(parent.id) == str(self.id):
            raise ValidationError({"parent_category_id": ["Category cannot be its own parent"]})

        level = parent.level + 1 if parent is not None else 0
        _check_level(level + subtree_depth)

        previous_parent_id = self.parent_category_id
        self.parent_category_id = str(parent.id) if parent is not None else None
        self.level = level
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryMoved(
                category_id=str(self.id),
                previous_parent_id=previous_parent_id,
                parent_category_id=self.parent_category_id,
                level=level,
            )
        )

    def relevel(self, level):
        """Follow an ancestor's move; only the stored depth changes."""
        self.level = level
        self.updated_at = datetime.now(UTC)


@dataclass
class CategoryNode:
    category: Category
    full_path: str
    product_count: int = 0
    children: list["CategoryNode"] = field(default_factory=list)


def _sort_key(category):
    return (category.display_order or 0, category.name.lower())


def build_tree(categories, product_counts=None) -> list[CategoryNode]:
    """Arrange a flat list of categories into root nodes with nested children.

    Siblings are ordered by display order, then name. A category whose parent
    is missing from ``categories`` is treated as a root.
    """
    product_counts = product_counts or {}
    by_parent = {}
    known = {str(c.id) for c in categories}
    for category in categories:
        parent_id = category.parent_category_id if category.parent_category_id in known else None
        by_parent.setdefault(parent_id, []).append(category)

    def nodes(parent_id, parent_path):
        result = []
        for category in sorted(by_parent.get(parent_id, []), key=_sort_key):
            path = f"{parent_path} > {category.name}" if parent_path else category.name
            node = CategoryNode(category, path, product_counts.get(str(category.id), 0))
            node.children = nodes(str(category.id), path)
            result.append(node)
        return result

    return nodes(None, "")


def subtree_ids(category_id, categories) -> set[str]:
    """Ids of every descendant of ``category_id`` (not including itself)."""
    children = {}
    for category in categories:
        if category.parent_category_id:
            children.setdefault(str(category.parent_category_id), []).append(str(category.id))

    found = set()
    pending = list(children.get(str(category_id), []))
    while pending:
        current = pending.pop()
        if current not in found:
            found.add(current)
            pending.extend(children.get(current, []))
    return found
