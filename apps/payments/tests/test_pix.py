"""
Tests for PIX BR Code generation.
"""

import pytest
from decimal import Decimal

from apps.payments.services import PixPaymentGenerator, PixNotConfiguredError


class TestPixPayload:

    def test_crc16_check_value(self):
        # CRC-16/CCITT-FALSE reference value
        assert PixPaymentGenerator.crc16('123456789') == '29B1'

    def test_payload_fields(self):
        payload = PixPaymentGenerator.generate_payload(
            pix_key='futebol@example.com',
            amount=Decimal('50'),
            merchant_name='Futebol Fácil',
            merchant_city='São Paulo',
            txid='ABC123',
        )

        assert payload.startswith('000201')
        assert '0014br.gov.bcb.pix0119futebol@example.com' in payload
        assert '5303986' in payload
        assert '540550.00' in payload
        assert '5802BR' in payload
        assert '5913Futebol Facil' in payload
        assert '6009Sao Paulo' in payload
        assert '62100506ABC123' in payload

    def test_payload_ends_with_valid_crc(self):
        payload = PixPaymentGenerator.generate_payload(pix_key='key', amount=Decimal('10.00'))

        body, crc = payload[:-4], payload[-4:]
        assert body.endswith('6304')
        assert crc == PixPaymentGenerator.crc16(body)

    def test_amount_is_optional(self):
        payload = PixPaymentGenerator.generate_payload(pix_key='key')

        assert '54' not in payload.split('5303986')[1][:2]

    def test_long_name_is_cut(self):
        payload = PixPaymentGenerator.generate_payload(
            pix_key='key',
            merchant_name='A' * 40,
            merchant_city='B' * 40,
        )

        assert '5925' + 'A' * 25 in payload
        assert '6015' + 'B' * 15 in payload


@pytest.mark.django_db
class TestTopUp:

    def test_top_up_code(self, settings, player):
        settings.PIX_KEY = 'futebol@example.com'

        data = PixPaymentGenerator.generate_for_top_up(amount=Decimal('30'), user=player)

        assert data['amount'] == Decimal('30.00')
        assert '540530.00' in data['payload']
        assert data['qr_code_base64']

    def test_missing_key(self, settings):
        settings.PIX_KEY = ''

        with pytest.raises(PixNotConfiguredError):
            PixPaymentGenerator.generate_for_top_up(amount=Decimal('30'))
