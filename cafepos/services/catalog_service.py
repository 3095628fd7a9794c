"""Catalog service - categories and products."""
import logging
from typing import Dict, Any, List, Optional, Tuple

from cafepos.database import transaction
from cafepos.exceptions import NotFoundError, ValidationError
from cafepos.models import Category, Product
from cafepos.utils.formatters import parse_amount

logger = logging.getLogger(__name__)


def _clean_text(data: Dict[str, Any], field: str, required: bool = False, max_length: int = None) -> Optional[str]:
    value = data.get(field)
    value = str(value).strip() if value is not None else ''
    if required and not value:
        raise ValidationError(f'{field} is required')
    if max_length and len(value) > max_length:
        raise ValidationError(f'{field} must be at most {max_length} characters')
    return value or None


def _parse_id(value, label: str) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {label} id')


# ============================================================================
# Categories
# ============================================================================

def list_categories(session) -> List[Category]:
    return session.query(Category).order_by(Category.id).all()


def save_category(session, data: Dict[str, Any]) -> Tuple[Category, bool]:
    """
    Create a category, or update it when ``data`` carries an ``id``.

    Returns:
        (category, created)
    """
    category_id = _parse_id(data.get('id'), 'category')
    name = _clean_text(data, 'name', required=True, max_length=120)
    name_ar = _clean_text(data, 'name_ar', max_length=120)
    icon = _clean_text(data, 'icon', max_length=60)

    with transaction(session):
        if category_id:
            category = session.query(Category).filter_by(id=category_id).first()
            if not category:
                raise NotFoundError(f'Category #{category_id} not found')
            created = False
        else:
            category = Category()
            session.add(category)
            created = True

        category.name = name
        category.name_ar = name_ar
        category.icon = icon

    return category, created


def delete_category(session, category_id: int) -> Optional[str]:
    """
    Hard delete a category. Its products stay, without a category.

    Returns:
        Name of the deleted category, or None if it did not exist
    """
    category = session.query(Category).filter_by(id=category_id).first()
    if not category:
        return None
    name = category.name

    with transaction(session):
        session.query(Product).filter(Product.category_id == category_id).update(
            {Product.category_id: None}, synchronize_session='fetch'
        )
        session.delete(category)

    logger.info(f"Category {name!r} deleted")
    return name


# ============================================================================
# Products
# ============================================================================

def list_products(session, include_inactive: bool = False) -> List[Product]:
    query = session.query(Product)
    if not include_inactive:
        query = query.filter(Product.active == True)  # noqa: E712
    return query.order_by(Product.id).all()


def save_product(session, data: Dict[str, Any]) -> Tuple[Product, bool]:
    """
    Create a product, or update it when ``data`` carries an ``id``.

    Returns:
        (product, created)

    Raises:
        ValidationError: missing name, bad price, unknown category
        NotFoundError: update of an unknown product
    """
    product_id = _parse_id(data.get('id'), 'product')
    name = _clean_text(data, 'name', required=True, max_length=120)
    try:
        price = parse_amount(data.get('price'), 'price')
    except ValueError as e:
        raise ValidationError(str(e))

    category_id = _parse_id(data.get('category_id'), 'category')
    if category_id and not session.query(Category.id).filter_by(id=category_id).first():
        raise ValidationError(f'Category #{category_id} does not exist')

    with transaction(session):
        if product_id:
            product = session.query(Product).filter_by(id=product_id).first()
            if not product:
                raise NotFoundError(f'Product #{product_id} not found')
            created = False
        else:
            product = Product(active=True)
            session.add(product)
            created = True

        product.name = name
        product.name_ar = _clean_text(data, 'name_ar', max_length=120)
        product.description = _clean_text(data, 'description')
        product.description_ar = _clean_text(data, 'description_ar')
        product.price = price
        product.image = _clean_text(data, 'image', max_length=255)
        product.category_id = category_id

    return product, created


def deactivate_product(session, product_id: int) -> Optional[str]:
    """
    Soft delete: hide the product from the catalog, keep it for history.

    Returns:
        Name of the product, or None if it does not exist
    """
    product = session.query(Product).filter_by(id=product_id).first()
    if not product:
        return None
    with transaction(session):
        product.active = False
    return product.name
