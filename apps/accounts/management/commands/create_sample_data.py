"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data

This creates:
- 1 admin (admin@example.com / admin123)
- 20 players (password123) with starting credits
- "Futebol de Terça": a recurring Tuesday match with 12 confirmed,
  3 invited and 1 declined player, some fees already paid

Balances and paid flags go through the ledger services, so the credit
history matches the balances.
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from decimal import Decimal
from datetime import timedelta
import random

from apps.accounts.models import User, UserRole
from apps.matches.models import Match, Participation
from apps.matches.services import (
    create_match,
    invite_user,
    confirm_participation,
    decline_participation,
)
from apps.payments.models import Payment, CreditTransaction
from apps.payments.services import create_manual_payment, toggle_payment_status


PLAYER_NAMES = [
    'Marcus Rashford', 'Bukayo Saka', 'Jack Grealish', 'Declan Rice', 'Jude Bellingham',
    'John Stones', 'Jordan Pickford', 'Phil Foden', 'Kyle Walker', 'Harry Kane',
    'Gabriel Jesus', 'Vinicius Jr', 'Rodrygo Goês', 'Neymar Jr', 'Alisson Becker',
    'Ederson Moraes', 'Casemiro', 'Marquinhos', 'Richarlison', 'Lucas Paquetá',
]


class Command(BaseCommand):
    help = 'Create sample players and a match for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        admin = self.create_admin()
        players = self.create_players(admin)
        match = self.create_match(admin, players)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write(f'Match: {match.title} ({match.id})')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (admin)')
        self.stdout.write(f'  {players[0].email} / password123')

    def clear_data(self):
        """Clear all data from the database."""
        CreditTransaction.objects.all().delete()
        Payment.objects.all().delete()
        Participation.objects.all().delete()
        Match.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_admin(self):
        self.stdout.write('  Creating admin...')

        admin, _ = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'display_name': 'Admin',
                'role': UserRole.ADMIN,
                'is_staff': True,
            }
        )
        admin.set_password('admin123')
        admin.save()

        return admin

    def create_players(self, admin):
        """Create players and top up their credits with manual payments."""
        self.stdout.write('  Creating players...')

        players = []
        for name in PLAYER_NAMES:
            slug = name.lower().replace(' ', '_')
            player, created = User.objects.get_or_create(
                email=f'{slug}@example.com',
                defaults={
                    'display_name': name,
                    'phone': '(11) 99999-9999',
                    'photo_url': f'https://ui-avatars.com/api/?name={name.replace(" ", "+")}&background=random&color=fff',
                }
            )
            if created:
                player.set_password('password123')
                player.save()

                amount = Decimal(random.randint(0, 100) * 5)
                if amount > 0:
                    create_manual_payment(
                        user_id=player.id,
                        amount=amount,
                        entered_by=admin,
                        description='Saldo inicial',
                    )
            players.append(player)

        return players

    def create_match(self, admin, players):
        """Weekly match: first 12 confirmed, next 3 invited, 16th declined."""
        self.stdout.write('  Creating match...')

        match = create_match(
            created_by=admin,
            title='Futebol de Terça',
            description='Pelada semanal dos amigos na Arena Central.',
            date=timezone.now() + timedelta(days=2),
            location='Arena Central',
            max_players=12,
            price_per_player=Decimal('25.00'),
            is_recurring=True,
            recurring_day=2,
        )

        for index, player in enumerate(players):
            if index < 12:
                confirm_participation(match_id=match.id, user=player)
                if random.random() > 0.5:
                    toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin)
            elif index < 15:
                invite_user(match_id=match.id, user=player, invited_by=admin)
            elif index < 16:
                decline_participation(match_id=match.id, user=player)

        return match
