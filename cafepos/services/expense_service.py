"""Expense service."""
import logging
from typing import Dict, Any, List, Optional, Tuple

from cafepos.database import transaction
from cafepos.exceptions import NotFoundError, ValidationError
from cafepos.models import Expense
from cafepos.utils.formatters import parse_amount, parse_date

logger = logging.getLogger(__name__)


def list_expenses(session, archived: bool = False) -> List[Expense]:
    """Active (or archived) expenses, most recent date first."""
    return (
        session.query(Expense)
        .filter(Expense.is_archived == archived)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


def save_expense(session, data: Dict[str, Any]) -> Tuple[Expense, bool]:
    """
    Create an expense, or update it when ``data`` carries an ``id``.

    Returns:
        (expense, created)
    """
    title = str(data.get('title') or '').strip()
    if not title:
        raise ValidationError('title is required')
    try:
        amount = parse_amount(data.get('amount'), 'amount')
        expense_date = parse_date(data.get('date'))
    except ValueError as e:
        raise ValidationError(str(e))
    if expense_date is None:
        raise ValidationError('date is required')
    category = str(data.get('category') or '').strip()

    expense_id = data.get('id')
    with transaction(session):
        if expense_id:
            expense = session.query(Expense).filter_by(id=expense_id).first()
            if not expense:
                raise NotFoundError(f'Expense #{expense_id} not found')
            created = False
        else:
            expense = Expense(is_archived=False)
            session.add(expense)
            created = True

        expense.title = title
        expense.amount = amount
        expense.category = category
        expense.date = expense_date

    return expense, created


def set_archived(session, expense_id: int, archived: bool) -> bool:
    with transaction(session):
        updated = session.query(Expense).filter(Expense.id == expense_id).update(
            {Expense.is_archived: archived}, synchronize_session='fetch'
        )
    return updated > 0


def delete_expense(session, expense_id: int) -> bool:
    with transaction(session):
        removed = session.query(Expense).filter(Expense.id == expense_id).delete(
            synchronize_session='fetch'
        )
    return removed > 0
