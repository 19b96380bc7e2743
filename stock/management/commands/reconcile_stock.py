from django.core.management.base import BaseCommand, CommandError

from configurations.base_features.exceptions.base_exceptions import LocalBaseException
from stock.models import StockItem
from stock.services import stock_ledger


class Command(BaseCommand):
    help = 'Compare stock item quantities with their movement ledger and optionally reset drifted items'

    def add_arguments(self, parser):
        parser.add_argument(
            '--item',
            type=str,
            help='Item code to check (if not provided, checks every item)'
        )
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Reset drifted quantities to the ledger total'
        )

    def handle(self, *args, **options):
        items = StockItem.objects.order_by('item_code')
        if options['item']:
            items = items.filter(item_code=options['item'])
            if not items.exists():
                raise CommandError(f"Stock item {options['item']} not found")

        drifted = 0
        for item_id in items.values_list('id', flat=True):
            try:
                balance = stock_ledger.ledger_balance(item_id)
                if balance.is_consistent:
                    continue
                drifted += 1
                self.stdout.write(
                    self.style.WARNING(
                        f"{balance.item_code}: stored {balance.stored_quantity}, "
                        f"ledger {balance.ledger_quantity} ({balance.movement_count} movements)"
                    )
                )
                if options['fix']:
                    stock_ledger.reconcile(item_id, performer='reconcile_stock')
                    self.stdout.write(self.style.SUCCESS(f"{balance.item_code}: reset to {balance.ledger_quantity}"))
            except LocalBaseException as e:
                raise CommandError(e.message)

        if drifted:
            self.stdout.write(f"{drifted} item(s) drifted from the ledger")
        else:
            self.stdout.write(self.style.SUCCESS('All stock items match their ledger'))
