from decimal import Decimal
import unicodedata

from django.conf import settings

from .exceptions import PixNotConfiguredError


class PixPaymentGenerator:
    """
    Generate PIX "copia e cola" codes and QR images for credit top-ups.

    PIX codes follow the EMV Merchant Presented Mode layout used by the
    Brazilian Central Bank (BR Code). The payload is a sequence of
    ``ID + LENGTH + VALUE`` fields, each ID and length two digits::

        00 Payload format indicator ("01")
        26 Merchant account (00 GUI "br.gov.bcb.pix", 01 PIX key)
        52 Merchant category code ("0000")
        53 Currency (986 = BRL)
        54 Amount (optional)
        58 Country code ("BR")
        59 Merchant name (max 25)
        60 Merchant city (max 15)
        62 Additional data (05 transaction id, "***" when none)
        63 CRC16 checksum

    Example:
        Code for a R$ 50,00 top-up::

            payload = PixPaymentGenerator.generate_payload(
                pix_key='futebol@example.com',
                amount=Decimal('50.00'),
                merchant_name='Futebol Facil',
                merchant_city='Sao Paulo',
            )
            image = PixPaymentGenerator.generate_qr_image(payload)

    Note:
        Requires the ``qrcode`` library with PIL support.
    """

    GUI = 'br.gov.bcb.pix'

    @staticmethod
    def _field(field_id, value):
        return f'{field_id}{len(value):02d}{value}'

    @staticmethod
    def _clean(text, limit):
        # BR Code only accepts plain ASCII in name and city
        ascii_text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode()
        return ascii_text.strip()[:limit]

    @staticmethod
    def crc16(payload):
        """CRC16-CCITT (poly 0x1021, init 0xFFFF) as 4 uppercase hex digits."""
        crc = 0xFFFF
        for byte in payload.encode('utf-8'):
            crc ^= byte << 8
            for _ in range(8):
                if crc & 0x8000:
                    crc = ((crc << 1) ^ 0x1021) & 0xFFFF
                else:
                    crc = (crc << 1) & 0xFFFF
        return f'{crc:04X}'

    @classmethod
    def generate_payload(
        cls,
        pix_key,
        amount=None,
        merchant_name='',
        merchant_city='',
        txid='***'
    ):
        """
        Build the PIX copy-and-paste string.

        Args:
            pix_key (str): Receiver PIX key (e-mail, phone, CPF/CNPJ or random key)
            amount (Decimal, optional): Fixed amount; omitted lets the payer type it
            merchant_name (str): Receiver name shown in the banking app
            merchant_city (str): Receiver city
            txid (str): Transaction id, alphanumeric up to 25 chars

        Returns:
            str: Payload ending with the CRC field
        """
        account = cls._field('00', cls.GUI) + cls._field('01', pix_key)
        txid = ''.join(c for c in txid if c.isalnum() or c == '*')[:25] or '***'

        parts = [
            cls._field('00', '01'),
            cls._field('26', account),
            cls._field('52', '0000'),
            cls._field('53', '986'),
        ]
        if amount is not None:
            parts.append(cls._field('54', f'{Decimal(amount):.2f}'))
        parts += [
            cls._field('58', 'BR'),
            cls._field('59', cls._clean(merchant_name, 25) or 'N'),
            cls._field('60', cls._clean(merchant_city, 15) or 'N'),
            cls._field('62', cls._field('05', txid)),
        ]

        payload = ''.join(parts) + '6304'
        return payload + cls.crc16(payload)

    @staticmethod
    def generate_qr_image(payload, output_path=None):
        """
        Render a payload as a QR code.

        Returns:
            PIL.Image.Image | str: The image, or output_path after saving to it
        """
        import qrcode

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        if output_path:
            img.save(output_path)
            return output_path

        return img

    @classmethod
    def generate_for_top_up(cls, amount, user=None):
        """
        Payload and base64 PNG for topping up credits with the group's key.

        Raises:
            PixNotConfiguredError: If PIX_KEY is not set
        """
        import base64
        from io import BytesIO

        if not settings.PIX_KEY:
            raise PixNotConfiguredError("PIX key is not configured")

        txid = f'FF{str(user.id).replace("-", "")[:20]}' if user else '***'
        payload = cls.generate_payload(
            pix_key=settings.PIX_KEY,
            amount=amount,
            merchant_name=settings.PIX_MERCHANT_NAME,
            merchant_city=settings.PIX_MERCHANT_CITY,
            txid=txid,
        )

        buffer = BytesIO()
        cls.generate_qr_image(payload).save(buffer, format='PNG')

        return {
            'payload': payload,
            'amount': Decimal(amount).quantize(Decimal('0.01')),
            'qr_code_base64': base64.b64encode(buffer.getvalue()).decode(),
        }
