"""Catalog blueprint: products and categories."""
from flask import Blueprint, jsonify

from cafepos.blueprints import json_body, success
from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service, catalog_service

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')


# ============================================================================
# Products
# ============================================================================

@catalog_bp.route('/products', methods=['GET'])
def list_products():
    """Active products, public for the customer menu."""
    session = get_session()
    return jsonify([p.to_dict() for p in catalog_service.list_products(session)])


@catalog_bp.route('/products', methods=['POST'])
@require_auth
def save_product():
    session = get_session()
    product, created = catalog_service.save_product(session, json_body())

    action = AuditAction.PRODUCT_CREATED if created else AuditAction.PRODUCT_UPDATED
    verb = 'Created' if created else 'Updated'
    audit_service.log_action(session, current_actor(), action, f"{verb} product: {product.name}")
    return success(id=product.id)


@catalog_bp.route('/products/<int:product_id>', methods=['DELETE'])
@require_auth
def delete_product(product_id):
    """Soft delete: the product leaves the menu, past orders keep it."""
    session = get_session()
    name = catalog_service.deactivate_product(session, product_id)
    audit_service.log_action(session, current_actor(), AuditAction.PRODUCT_DELETED,
                             f"Deleted product: {name or product_id}")
    return success()


# ============================================================================
# Categories
# ============================================================================

@catalog_bp.route('/categories', methods=['GET'])
def list_categories():
    session = get_session()
    return jsonify([c.to_dict() for c in catalog_service.list_categories(session)])


@catalog_bp.route('/categories', methods=['POST'])
@require_auth
def save_category():
    session = get_session()
    category, created = catalog_service.save_category(session, json_body())

    action = AuditAction.CATEGORY_CREATED if created else AuditAction.CATEGORY_UPDATED
    verb = 'Created' if created else 'Updated'
    audit_service.log_action(session, current_actor(), action, f"{verb} category: {category.name}")
    return success(id=category.id)


@catalog_bp.route('/categories/<int:category_id>', methods=['DELETE'])
@require_auth
def delete_category(category_id):
    session = get_session()
    name = catalog_service.delete_category(session, category_id)
    audit_service.log_action(session, current_actor(), AuditAction.CATEGORY_DELETED,
                             f"Deleted category: {name or category_id}")
    return success()
