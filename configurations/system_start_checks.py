import logging
from django.conf import settings
from django.db import connection

from configurations.base_features.constants import ROLE_ADMIN
from factory_users.models import FactoryUser
from stock.models import StockItem
from stock.services import stock_ledger

logger = logging.getLogger(__name__)


def admin_user_check():
    """Create the bootstrap admin from the environment when no admin exists yet."""
    username = settings.FACTORY_ADMIN_USERNAME
    password = settings.FACTORY_ADMIN_PASSWORD
    if not username or not password:
        logger.info("No bootstrap admin configured, skipping admin check")
        return None
    if FactoryUser.objects.filter(role=ROLE_ADMIN).exists():
        return None
    user = FactoryUser.objects.create_superuser(username=username, password=password, name=username)
    logger.info("Created bootstrap admin %s", username)
    return user


def stock_ledger_check():
    """Report stock items whose stored quantity drifted from their movement ledger."""
    drifted = []
    for item_id in StockItem.objects.values_list("id", flat=True):
        report = stock_ledger.ledger_balance(item_id)
        if report.drift:
            drifted.append(report)
            logger.warning(
                "Stock item %s quantity %s differs from ledger %s",
                report.item_code, report.stored_quantity, report.ledger_quantity,
            )
    return drifted


def system_start_checks():
    logger.info("Running start checks against %s", connection.vendor)
    admin_user_check()
    stock_ledger_check()
