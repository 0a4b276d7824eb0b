from rest_framework import viewsets, mixins, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.models import User
from apps.accounts.permissions import IsGroupAdmin
from apps.matches.models import Match
from .models import Payment, PaymentStatus
from .permissions import IsPaymentOwnerOrAdmin
from .serializers import (
    PaymentSerializer,
    PaymentFilterSerializer,
    PaymentCreateSerializer,
    ManualPaymentSerializer,
    CreditAdjustmentSerializer,
    CreditTransactionSerializer,
    ReceiptAnalysisRequestSerializer,
    ReceiptAnalysisSerializer,
    PixRequestSerializer,
    PixCodeSerializer,
)
from .services import (
    create_payment,
    validate_payment,
    reject_payment,
    create_manual_payment,
    adjust_credits,
    get_credit_transactions,
    analyze_receipt,
    PixPaymentGenerator,
    InvalidAmountError,
    PixNotConfiguredError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


class CreditStatementSerializer(drf_serializers.Serializer):
    balance = drf_serializers.DecimalField(max_digits=10, decimal_places=2)
    transactions = CreditTransactionSerializer(many=True)


class PaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet
):
    """
    Payments submitted by players and their review by admins.

    list: Own payments (admins see everyone's), filterable by status
    create: Submit a payment claim; stays pending until validated
    retrieve: Payment details
    """

    queryset = Payment.objects.select_related(
        'user',
        'match',
        'entered_by',
        'validated_by'
    )
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsPaymentOwnerOrAdmin]
    pagination_class = PaymentPagination

    def get_permissions(self):
        if self.action in ['validate', 'reject', 'pending', 'manual', 'adjust']:
            return [IsAuthenticated(), IsGroupAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user

        if self.action != 'list':
            return queryset

        filter_serializer = PaymentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if not user.is_group_admin:
            queryset = queryset.filter(user=user)
        elif params.get('user'):
            queryset = queryset.filter(user_id=params['user'])

        if params.get('status'):
            queryset = queryset.filter(status=params['status'])

        return queryset

    @extend_schema(
        request=PaymentCreateSerializer,
        responses={201: PaymentSerializer, 400: ErrorResponseSerializer},
    )
    def create(self, request, *args, **kwargs):
        """
        Submit a payment claim for the current user.

        POST /api/payments/
        """
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        match = None
        if data.get('match'):
            try:
                match = Match.objects.get(id=data['match'])
            except Match.DoesNotExist:
                return Response(
                    {'error': 'Partida não encontrada.'},
                    status=status.HTTP_400_BAD_REQUEST
                )

        try:
            payment = create_payment(
                user=request.user,
                amount=data['amount'],
                match=match,
                receipt_url=data.get('receipt_url', ''),
                description=data.get('description', ''),
                vision_analysis=data.get('vision_analysis'),
            )
        except InvalidAmountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def validate(self, request, pk=None):
        """
        Validate a pending payment and credit the player.

        POST /api/payments/{id}/validate/
        """
        payment = validate_payment(payment_id=pk, validated_by=request.user)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=None, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """
        Reject a pending payment.

        POST /api/payments/{id}/reject/
        """
        payment = reject_payment(payment_id=pk, rejected_by=request.user)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(responses={200: PaymentSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def pending(self, request):
        """
        Review queue, oldest first.

        GET /api/payments/pending/
        """
        payments = (
            self.get_queryset()
            .filter(status=PaymentStatus.PENDING)
            .order_by('created_at')
        )
        return Response(PaymentSerializer(payments, many=True).data)

    @extend_schema(
        request=ManualPaymentSerializer,
        responses={201: PaymentSerializer, 400: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'])
    def manual(self, request):
        """
        Record money received outside the app; credited immediately.

        POST /api/payments/manual/
        """
        serializer = ManualPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = create_manual_payment(
                user_id=data['user'],
                amount=data['amount'],
                entered_by=request.user,
                description=data.get('description', ''),
            )
        except User.DoesNotExist:
            return Response(
                {'error': 'Usuário não encontrado.'},
                status=status.HTTP_404_NOT_FOUND
            )
        except InvalidAmountError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=CreditAdjustmentSerializer,
        responses={201: CreditTransactionSerializer, 404: ErrorResponseSerializer},
    )
    @action(detail=False, methods=['post'])
    def adjust(self, request):
        """
        Correct a player's balance by a signed amount.

        POST /api/payments/adjust/
        """
        serializer = CreditAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            record = adjust_credits(
                user_id=data['user'],
                amount=data['amount'],
                adjusted_by=request.user,
                description=data.get('description', ''),
            )
        except User.DoesNotExist:
            return Response(
                {'error': 'Usuário não encontrado.'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(CreditTransactionSerializer(record).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=ReceiptAnalysisRequestSerializer,
    responses={200: ReceiptAnalysisSerializer, 502: ErrorResponseSerializer, 503: ErrorResponseSerializer},
    description="Read amount and date from a receipt image to pre-fill a payment.",
    tags=['payments'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def analyze_receipt_view(request):
    """
    POST /api/payments/analyze-receipt/
    Body: {"image_url": "https://..."}
    """
    serializer = ReceiptAnalysisRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = analyze_receipt(image_url=serializer.validated_data['image_url'])
    return Response(ReceiptAnalysisSerializer(result).data)


@extend_schema(
    responses={200: CreditStatementSerializer},
    description="Current balance and credit history of the logged-in user, newest first.",
    tags=['payments'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_credits(request):
    """GET /api/payments/credits/"""
    transactions = get_credit_transactions(user_id=request.user.id)
    request.user.refresh_from_db(fields=['credits'])

    serializer = CreditStatementSerializer({
        'balance': request.user.credits,
        'transactions': transactions,
    })
    return Response(serializer.data)


@extend_schema(
    parameters=[OpenApiParameter('amount', float, required=True)],
    responses={200: PixCodeSerializer, 503: ErrorResponseSerializer},
    description="PIX copy-and-paste code and QR image for topping up credits.",
    tags=['payments'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pix_code(request):
    """GET /api/payments/pix/?amount=50.00"""
    serializer = PixRequestSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    try:
        data = PixPaymentGenerator.generate_for_top_up(
            amount=serializer.validated_data['amount'],
            user=request.user,
        )
    except PixNotConfiguredError:
        return Response(
            {'error': 'Chave PIX não configurada.'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return Response(PixCodeSerializer(data).data)
