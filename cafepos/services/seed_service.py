"""
Reference data for a fresh database: order statuses, exchange rate,
starter categories and the two staff accounts.
"""
import logging

from cafepos.models import OrderStatus, Category, User, UserRole, DEFAULT_ORDER_STATUSES
from cafepos.services import settings_service
from cafepos.services.user_service import create_user

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ('Hot Coffee', 'قهوة ساخنة', 'Coffee'),
    ('Cold Drinks', 'مشروبات باردة', 'Milk'),
)


def seed_order_statuses(session) -> int:
    """Insert any missing status of the fixed vocabulary."""
    existing = {label.lower() for (label,) in session.query(OrderStatus.label).all()}
    added = 0
    for label, label_ar, color, is_default in DEFAULT_ORDER_STATUSES:
        if label.lower() in existing:
            continue
        session.add(OrderStatus(label=label, label_ar=label_ar, color=color, is_default=is_default))
        added += 1
    session.commit()
    return added


def seed_database(session, config) -> None:
    """
    Populate reference data. Safe to run on every start-up: each part is
    only inserted when missing.
    """
    added_statuses = seed_order_statuses(session)
    settings_service.ensure_defaults(session, config.get('DEFAULT_EXCHANGE_RATE', '89500'))

    if session.query(User.id).count() == 0:
        logger.info("Seeding default staff accounts")
        create_user(
            session,
            username=config['SEED_ADMIN_USERNAME'],
            password=config['SEED_ADMIN_PASSWORD'],
            name=config.get('SEED_ADMIN_NAME', 'Admin'),
            role=UserRole.ADMIN.value,
            salary=2000
        )
        create_user(
            session,
            username=config['SEED_CASHIER_USERNAME'],
            password=config['SEED_CASHIER_PASSWORD'],
            name='Cashier',
            role=UserRole.CASHIER.value,
            salary=800
        )

        if session.query(Category.id).count() == 0:
            for name, name_ar, icon in DEFAULT_CATEGORIES:
                session.add(Category(name=name, name_ar=name_ar, icon=icon))
            session.commit()

    if added_statuses:
        logger.info(f"Seeded {added_statuses} order status(es)")
