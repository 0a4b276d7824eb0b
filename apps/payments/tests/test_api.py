import pytest
from decimal import Decimal
from unittest.mock import patch
from django.urls import reverse
from rest_framework import status
from apps.payments.models import Payment, PaymentStatus, CreditTransaction


# =============================================================================
# Submission and listing
# =============================================================================

@pytest.mark.django_db
class TestPaymentSubmission:
    """Tests for /api/payments/"""

    def test_submit_payment(self, authenticated_client, player):
        """Submitted payments wait for validation."""
        url = reverse('payments:payment-list')
        data = {
            'amount': '50.00',
            'receipt_url': 'https://storage.example.com/receipts/2.jpg',
            'description': 'PIX',
        }
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == PaymentStatus.PENDING
        assert response.data['user']['id'] == str(player.id)

        player.refresh_from_db()
        assert player.credits == Decimal('0.00')

    def test_submit_for_match(self, authenticated_client, match):
        url = reverse('payments:payment-list')
        response = authenticated_client.post(
            url, {'amount': '25.00', 'match': str(match.id)}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['match_title'] == match.title

    def test_submit_invalid_amount(self, authenticated_client):
        url = reverse('payments:payment-list')
        response = authenticated_client.post(url, {'amount': '0.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_submit_requires_auth(self, api_client):
        url = reverse('payments:payment-list')
        response = api_client.post(url, {'amount': '10.00'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_player_lists_only_own(self, authenticated_client, pending_payment, other_player):
        Payment.objects.create(user=other_player, amount=Decimal('10.00'), entered_by=other_player)

        url = reverse('payments:payment-list')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(pending_payment.id)

    def test_admin_lists_all_with_status_filter(self, admin_client, pending_payment, other_player):
        Payment.objects.create(
            user=other_player,
            amount=Decimal('10.00'),
            entered_by=other_player,
            status=PaymentStatus.REJECTED,
        )

        url = reverse('payments:payment-list')
        response = admin_client.get(url, {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_player_cannot_see_others_payment(self, authenticated_client, other_player):
        payment = Payment.objects.create(user=other_player, amount=Decimal('10.00'), entered_by=other_player)

        url = reverse('payments:payment-detail', kwargs={'pk': payment.id})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Admin review
# =============================================================================

@pytest.mark.django_db
class TestPaymentReview:

    def test_validate(self, admin_client, pending_payment, player):
        url = reverse('payments:payment-validate', kwargs={'pk': pending_payment.id})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.VALIDATED

        player.refresh_from_db()
        assert player.credits == Decimal('50.00')

    def test_double_validate_conflict(self, admin_client, pending_payment, player):
        url = reverse('payments:payment-validate', kwargs={'pk': pending_payment.id})
        admin_client.post(url)
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_409_CONFLICT

        player.refresh_from_db()
        assert player.credits == Decimal('50.00')

    def test_validate_malformed_id_not_found(self, admin_client):
        url = reverse('payments:payment-validate', kwargs={'pk': 'not-a-uuid'})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_reject_malformed_id_not_found(self, admin_client):
        url = reverse('payments:payment-reject', kwargs={'pk': 'not-a-uuid'})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_player_cannot_validate(self, authenticated_client, pending_payment):
        url = reverse('payments:payment-validate', kwargs={'pk': pending_payment.id})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reject(self, admin_client, pending_payment):
        url = reverse('payments:payment-reject', kwargs={'pk': pending_payment.id})
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.REJECTED
        assert not CreditTransaction.objects.exists()

    def test_pending_queue(self, admin_client, pending_payment):
        url = reverse('payments:payment-pending')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [p['id'] for p in response.data] == [str(pending_payment.id)]

    def test_manual_payment(self, admin_client, player):
        url = reverse('payments:payment-manual')
        data = {'user': str(player.id), 'amount': '20.00', 'description': 'Dinheiro'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == PaymentStatus.VALIDATED

        player.refresh_from_db()
        assert player.credits == Decimal('20.00')

    def test_manual_payment_unknown_user(self, admin_client):
        url = reverse('payments:payment-manual')
        data = {'user': '00000000-0000-0000-0000-000000000000', 'amount': '20.00'}
        response = admin_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_adjust(self, admin_client, player):
        url = reverse('payments:payment-adjust')
        response = admin_client.post(url, {'user': str(player.id), 'amount': '-7.50'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED

        player.refresh_from_db()
        assert player.credits == Decimal('-7.50')


# =============================================================================
# Credits, receipts, PIX
# =============================================================================

@pytest.mark.django_db
class TestCredits:

    def test_my_credits(self, authenticated_client, admin_client, pending_payment):
        admin_client.post(reverse('payments:payment-validate', kwargs={'pk': pending_payment.id}))

        response = authenticated_client.get(reverse('payments:my-credits'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '50.00'
        assert len(response.data['transactions']) == 1
        assert response.data['transactions'][0]['signed_amount'] == '50.00'


@pytest.mark.django_db
class TestAnalyzeReceipt:

    def test_analyze(self, authenticated_client):
        result = {'amount': Decimal('25.00'), 'date': '14/05/2024', 'raw_text': 'R$ 25,00'}

        with patch('apps.payments.views.analyze_receipt', return_value=result):
            response = authenticated_client.post(
                reverse('payments:analyze-receipt'),
                {'image_url': 'https://storage.example.com/r.jpg'},
                format='json',
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '25.00'
        assert response.data['date'] == '14/05/2024'

    def test_not_configured(self, authenticated_client, settings):
        settings.GOOGLE_VISION_API_KEY = ''

        response = authenticated_client.post(
            reverse('payments:analyze-receipt'),
            {'image_url': 'https://storage.example.com/r.jpg'},
            format='json',
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    def test_missing_image_url(self, authenticated_client):
        response = authenticated_client.post(reverse('payments:analyze-receipt'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestPixCode:

    def test_pix_code(self, authenticated_client, settings):
        settings.PIX_KEY = 'futebol@example.com'

        response = authenticated_client.get(reverse('payments:pix-code'), {'amount': '50.00'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payload'].startswith('000201')

    def test_pix_not_configured(self, authenticated_client, settings):
        settings.PIX_KEY = ''

        response = authenticated_client.get(reverse('payments:pix-code'), {'amount': '50.00'})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
