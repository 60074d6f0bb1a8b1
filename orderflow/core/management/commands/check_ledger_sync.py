"""
Django management command to check that every stock row's quantity equals
the signed sum of its transaction log, for both ledgers
"""
from django.core.management.base import BaseCommand, CommandError
from orderflow.inventory.services import inventory_ledger
from orderflow.pool_stock.services import pool_stock_ledger

LEDGERS = {
    'pool-stock': pool_stock_ledger,
    'inventory': inventory_ledger,
}


class Command(BaseCommand):
    help = 'Check stock row quantities against the sum of their txn deltas'

    def add_arguments(self, parser):
        parser.add_argument(
            '--ledger',
            choices=sorted(LEDGERS),
            help='Check one ledger only',
        )
        parser.add_argument(
            '--strict',
            action='store_true',
            help='Exit with an error when any discrepancy is found',
        )

    def handle(self, *args, **options):
        names = [options['ledger']] if options.get('ledger') else list(LEDGERS)

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("LEDGER RECONCILIATION"))
        self.stdout.write("=" * 80)

        found = 0
        for name in names:
            ledger = LEDGERS[name]
            rows = ledger.row_model.objects.count()
            discrepancies = ledger.discrepancies()
            self.stdout.write(f"\n{name}: {rows} rows checked, {len(discrepancies)} discrepancies")
            for row, balance in discrepancies:
                self.stdout.write(self.style.WARNING(
                    f"  row {row.pk} ({row}): quantity {row.quantity}, txn sum {balance}, "
                    f"difference {row.quantity - balance:+d}"
                ))
            found += len(discrepancies)

        self.stdout.write("")
        if not found:
            self.stdout.write(self.style.SUCCESS("All ledgers reconcile."))
            return
        if options.get('strict'):
            raise CommandError(f"{found} ledger discrepancies found")
        self.stdout.write(self.style.WARNING(f"{found} ledger discrepancies found"))
