"""Category management: commands and handler for the category tree."""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category, subtree_ids
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


def get_category(category_id, label="Category") -> Category:
    try:
        return current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError({"category_id": [f"{label} not found: {category_id}"]}) from exc


def _ensure_name_free(name, category_id=None):
    existing = current_domain.repository_for(Category).find_by_name(name)
    if existing is not None and str(existing.id) != str(category_id):
        raise ValidationError({"name": ["Category name already exists"]})


@storefront.command(part_of="Category")
class CreateCategory:
    name = String(required=True, max_length=100)
    description = Text()
    parent_category_id = Identifier()
    display_order = Integer(default=0)


@storefront.command(part_of="Category")
class UpdateCategory:
    """Edit a category. ``make_root`` detaches it from its parent."""

    category_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    parent_category_id = Identifier()
    make_root = Boolean(default=False)
    display_order = Integer()
    is_active = Boolean()


@storefront.command(part_of="Category")
class DeleteCategory:
    category_id = Identifier(required=True)


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        _ensure_name_free(command.name)

        parent = None
        if command.parent_category_id:
            parent = get_category(command.parent_category_id, label="Parent category")

        category = Category.create(
            name=command.name.strip(),
            description=command.description,
            parent=parent,
            display_order=command.display_order,
        )
        current_domain.repository_for(Category).add(category)
        logger.info("Category created", category_id=str(category.id), level=category.level)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = get_category(command.category_id)

        renamed = command.name is not None and command.name.strip() != category.name
        if renamed:
            _ensure_name_free(command.name, category.id)

        category.update_details(
            name=command.name.strip() if command.name else None,
            description=command.description,
            display_order=command.display_order,
            is_active=command.is_active,
        )

        moved = []
        if command.make_root or command.parent_category_id:
            moved = self._move(category, None if command.make_root else command.parent_category_id)

        repo.add(category)
        for descendant in moved:
            repo.add(descendant)

        if renamed:
            product_repo = current_domain.repository_for(Product)
            for product in product_repo.for_category(category.id):
                product.update_details(category=category.name)
                product_repo.add(product)
        logger.info("Category updated", category_id=str(category.id), moved=bool(moved))

    def _move(self, category, parent_id):
        """Re-parent ``category`` and re-level its subtree; returns the descendants touched."""
        if str(parent_id or "") == str(category.parent_category_id or ""):
            return []
        if parent_id is not None and str(parent_id) == str(category.id):
            raise ValidationError({"parent_category_id": ["Category cannot be its own parent"]})

        everything = current_domain.repository_for(Category).every()
        descendant_ids = subtree_ids(category.id, everything)
        if parent_id is not None and str(parent_id) in descendant_ids:
            raise ValidationError(
                {"parent_category_id": ["Cannot create circular reference in category hierarchy"]}
            )

        parent = get_category(parent_id, label="Parent category") if parent_id is not None else None
        descendants = [c for c in everything if str(c.id) in descendant_ids]
        depth = max((c.level - category.level for c in descendants), default=0)

        shift = -category.level
        category.move_under(parent, subtree_depth=depth)
        shift += category.level

        for descendant in descendants:
            descendant.relevel(descendant.level + shift)
        return descendants

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = get_category(command.category_id)

        if repo.children(category.id):
            raise InvalidOperationError(
                "Cannot delete category with subcategories. Delete subcategories first or reassign them."
            )
        if current_domain.repository_for(Product).count_for_category(category.id):
            raise InvalidOperationError(
                "Cannot delete category that has associated products. Please reassign or remove products first."
            )

        repo._dao.delete(category)
        logger.info("Category deleted", category_id=str(category.id))
