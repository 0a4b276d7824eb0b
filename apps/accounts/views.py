from rest_framework import status, generics, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema
from .models import User
from .permissions import IsGroupAdmin
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    ProfileUpdateSerializer,
    UserRoleSerializer,
    UserBalanceFilterSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    update_profile as update_profile_service,
    set_user_role,
    get_all_users,
    delete_user_account,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    PasswordConfirmationError,
    UserNotFoundError,
    InsufficientPermissionsError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class DeleteAccountRequestSerializer(serializers.Serializer):
    password = serializers.CharField(help_text="Current password for confirmation")
    confirm = serializers.BooleanField(help_text="Must be true to confirm deletion")


class UserListResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    players_with_balance = serializers.IntegerField()
    players_with_debt = serializers.IntegerField()
    users = UserSerializer(many=True)


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new player account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new player account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response({
        'message': 'Cadastro realizado com sucesso.',
        'user': UserSerializer(user).data,
        'tokens': _tokens_for(user),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    
    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    
    return Response({
        'message': 'Login realizado com sucesso.',
        'user': UserSerializer(user).data,
        'tokens': _tokens_for(user),
    })


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current user's profile, including the credit balance.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's profile (display_name, phone, photo_url).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    user = update_profile_service(user_id=request.user.id, **serializer.validated_data)
    return Response(UserSerializer(user).data)


@extend_schema(
    request=DeleteAccountRequestSerializer,
    responses={
        204: None,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Delete (anonymize) the current account after password confirmation.",
    tags=['auth'],
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_account(request):
    """Account deletion (anonymization)."""
    serializer = DeleteAccountRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if not serializer.validated_data['confirm']:
        return Response({
            'error': 'Confirmação obrigatória.'
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        delete_user_account(
            user_id=request.user.id,
            password=serializer.validated_data['password']
        )
    except PasswordConfirmationError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    parameters=[UserBalanceFilterSerializer],
    responses={200: UserListResponseSerializer},
    description="List all players with their balances (admin only).",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupAdmin])
def list_users(request):
    """List players with balance summary."""
    filter_serializer = UserBalanceFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    users = get_all_users(balance=filter_serializer.validated_data.get('balance'))

    return Response({
        'count': len(users),
        'players_with_balance': sum(1 for u in users if u.credits > 0),
        'players_with_debt': sum(1 for u in users if u.credits < 0),
        'users': UserSerializer(users, many=True).data,
    })


@extend_schema(
    request=UserRoleSerializer,
    responses={200: UserSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Change a user's role (admin only).",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupAdmin])
def change_role(request, pk):
    """Promote or demote a user."""
    serializer = UserRoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = set_user_role(
            user_id=pk,
            role=serializer.validated_data['role'],
            changed_by=request.user
        )
    except InsufficientPermissionsError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(UserSerializer(user).data)


class UserDetailView(generics.RetrieveAPIView):
    """
    Get a user profile by ID (admin only).
    
    GET /api/auth/users/{id}/
    """
    queryset = User.objects.filter(is_active=True, deleted_at__isnull=True)
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsGroupAdmin]
