# Generated manually for matches app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Match',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('date', models.DateTimeField()),
                ('location', models.CharField(max_length=200)),
                ('max_players', models.PositiveIntegerField(validators=[MinValueValidator(1)])),
                ('price_per_player', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('is_recurring', models.BooleanField(default=False)),
                ('recurring_day', models.PositiveSmallIntegerField(blank=True, null=True, validators=[MaxValueValidator(6)])),
                ('status', models.CharField(choices=[('upcoming', 'Agendada'), ('completed', 'Realizada'), ('cancelled', 'Cancelada')], default='upcoming', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='matches_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'matches',
                'ordering': ['date'],
                'indexes': [
                    models.Index(fields=['status', 'date'], name='matches_status_17036d_idx'),
                    models.Index(fields=['date'], name='matches_date_c27a85_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Participation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('pending', 'Convidado'), ('confirmed', 'Confirmado'), ('declined', 'Recusado')], default='pending', max_length=20)),
                ('paid', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('invited_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='invitations_sent', to=settings.AUTH_USER_MODEL)),
                ('match', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to='matches.match')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'match_participations',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['match', 'status'], name='match_parti_match_i_945584_idx'),
                    models.Index(fields=['user', 'status', 'paid'], name='match_parti_user_id_516494_idx'),
                ],
                'unique_together': {('match', 'user')},
            },
        ),
    ]
