"""Expenses blueprint."""
from flask import Blueprint, jsonify

from cafepos.blueprints import json_body, success
from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service, expense_service

expenses_bp = Blueprint('expenses', __name__, url_prefix='/api/expenses')


@expenses_bp.route('', methods=['GET'])
@require_auth
def list_expenses():
    session = get_session()
    return jsonify([e.to_dict() for e in expense_service.list_expenses(session)])


@expenses_bp.route('/archived', methods=['GET'])
@require_auth
def list_archived_expenses():
    session = get_session()
    return jsonify([e.to_dict() for e in expense_service.list_expenses(session, archived=True)])


@expenses_bp.route('', methods=['POST'])
@require_auth
def save_expense():
    session = get_session()
    expense, created = expense_service.save_expense(session, json_body())

    action = AuditAction.EXPENSE_CREATED if created else AuditAction.EXPENSE_UPDATED
    verb = 'Created' if created else 'Updated'
    audit_service.log_action(session, current_actor(), action,
                             f"{verb} expense: {expense.title} (${expense.amount})")
    return success(id=expense.id)


@expenses_bp.route('/<int:expense_id>/archive', methods=['POST'])
@require_auth
def archive_expense(expense_id):
    session = get_session()
    expense_service.set_archived(session, expense_id, True)
    audit_service.log_action(session, current_actor(), AuditAction.EXPENSE_ARCHIVED,
                             f"Archived expense #{expense_id}")
    return success()


@expenses_bp.route('/<int:expense_id>/unarchive', methods=['POST'])
@require_auth
def unarchive_expense(expense_id):
    session = get_session()
    expense_service.set_archived(session, expense_id, False)
    audit_service.log_action(session, current_actor(), AuditAction.EXPENSE_UNARCHIVED,
                             f"Unarchived expense #{expense_id}")
    return success()


@expenses_bp.route('/<int:expense_id>', methods=['DELETE'])
@require_auth
def delete_expense(expense_id):
    session = get_session()
    expense_service.delete_expense(session, expense_id)
    audit_service.log_action(session, current_actor(), AuditAction.EXPENSE_DELETED,
                             f"Deleted expense #{expense_id}")
    return success()
