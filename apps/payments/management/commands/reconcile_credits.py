"""
Management command to compare stored balances with the credit ledger.

Each user's balance should equal the sum of their credit records minus the
sum of their debit records. Drift can come from balances edited outside
the ledger services.

Usage:
    python manage.py reconcile_credits
    python manage.py reconcile_credits --user <uuid> --dry-run
"""

from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from apps.accounts.models import User
from apps.payments.services import reconcile_balance


class Command(BaseCommand):
    help = 'Recompute balances from the credit ledger and fix drift'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user',
            help='Only reconcile this user ID',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show drift without making changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        users = User.objects.all().order_by('display_name')
        if options['user']:
            users = users.filter(id=options['user'])
            if not users.exists():
                raise CommandError(f"User {options['user']} not found")

        drifted = 0
        for user in users:
            result = reconcile_balance(user_id=user.id, apply=not dry_run)
            if result['drift'] == Decimal('0.00'):
                continue

            drifted += 1
            self.stdout.write(
                f"  - {user.get_display_name()} | stored R$ {result['stored']} | "
                f"ledger R$ {result['expected']} | drift R$ {result['drift']}"
            )

        if drifted == 0:
            self.stdout.write(self.style.SUCCESS('All balances match the ledger.'))
            return

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f'\n--dry-run mode: {drifted} balance(s) not changed.')
            )
            return

        self.stdout.write(self.style.SUCCESS(f'\n✓ Reconciled {drifted} balance(s).'))
