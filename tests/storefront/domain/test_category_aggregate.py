"""Tests for the Category aggregate and the category tree helpers."""

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.brand import Brand
from storefront.catalogue.category import MAX_CATEGORY_LEVEL, Category, build_tree, subtree_ids
from storefront.catalogue.events import BrandCreated, BrandUpdated, CategoryCreated, CategoryMoved


def _chain(depth):
    """Categories nested ``depth`` deep: [root, child, grandchild, ...]."""
    chain = [Category.create(name="Level 0")]
    for level in range(1, depth):
        chain.append(Category.create(name=f"Level {level}", parent=chain[-1]))
    return chain


class TestCategoryCreation:
    def test_root(self):
        category = Category.create(name="Tack")

        assert category.level == 0
        assert category.is_root
        assert isinstance(category._events[0], CategoryCreated)

    def test_child_is_one_level_below_parent(self):
        tack = Category.create(name="Tack")
        saddles = Category.create(name="Saddles", parent=tack)

        assert saddles.level == 1
        assert saddles.parent_category_id == str(tack.id)
        assert not saddles.is_root

    def test_depth_is_limited(self):
        deepest = _chain(MAX_CATEGORY_LEVEL + 1)[-1]
        assert deepest.level == MAX_CATEGORY_LEVEL

        with pytest.raises(ValidationError) as exc_info:
            Category.create(name="Too deep", parent=deepest)
        assert "parent_category_id" in exc_info.value.messages


class TestCategoryMove:
    def test_move_under_new_parent(self):
        tack, saddles = _chain(2)
        apparel = Category.create(name="Apparel")
        saddles._events.clear()

        saddles.move_under(apparel)

        assert saddles.parent_category_id == str(apparel.id)
        event = saddles._events[0]
        assert isinstance(event, CategoryMoved)
        assert event.previous_parent_id == str(tack.id)

    def test_move_to_root(self):
        _, saddles = _chain(2)

        saddles.move_under(None)

        assert saddles.is_root
        assert saddles.level == 0

    def test_cannot_be_own_parent(self):
        category = Category.create(name="Tack")

        with pytest.raises(ValidationError) as exc_info:
            category.move_under(category)
        assert exc_info.value.messages["parent_category_id"] == ["Category cannot be its own parent"]

    def test_subtree_must_fit_under_new_parent(self):
        deep = _chain(MAX_CATEGORY_LEVEL)
        branch = Category.create(name="Branch")

        with pytest.raises(ValidationError):
            branch.move_under(deep[-1], subtree_depth=1)


class TestCategoryTree:
    def test_nested_paths_and_order(self):
        tack = Category.create(name="Tack")
        saddles = Category.create(name="Saddles", parent=tack, display_order=2)
        bridles = Category.create(name="Bridles", parent=tack, display_order=1)
        english = Category.create(name="English", parent=saddles)

        roots = build_tree([english, saddles, bridles, tack], {str(saddles.id): 3})

        assert [node.category.name for node in roots] == ["Tack"]
        children = roots[0].children
        assert [node.full_path for node in children] == ["Tack > Bridles", "Tack > Saddles"]
        assert children[1].product_count == 3
        assert children[1].children[0].full_path == "Tack > Saddles > English"

    def test_orphan_treated_as_root(self):
        _, saddles = _chain(2)

        roots = build_tree([saddles])

        assert [node.category.id for node in roots] == [saddles.id]

    def test_subtree_ids(self):
        root, child, grandchild = _chain(3)
        other = Category.create(name="Other")

        found = subtree_ids(root.id, [root, child, grandchild, other])

        assert found == {str(child.id), str(grandchild.id)}


class TestBrand:
    def test_create(self):
        brand = Brand.create(name="Circle Y", country_of_origin="USA")

        assert brand.is_active
        assert isinstance(brand._events[0], BrandCreated)

    def test_update_keeps_unspecified_fields(self):
        brand = Brand.create(name="Circle Y", country_of_origin="USA")

        brand.update_details(name="Circle Y Saddles", country_of_origin=None)

        assert brand.name == "Circle Y Saddles"
        assert brand.country_of_origin == "USA"
        assert isinstance(brand._events[-1], BrandUpdated)
