from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    """Own profile, including the credit balance."""
    
    is_admin = serializers.BooleanField(source='is_group_admin', read_only=True)
    
    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'phone',
            'photo_url',
            'credits',
            'role',
            'is_admin',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.Serializer):
    """Fields a player may change on their own profile."""
    
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    photo_url = serializers.URLField(max_length=500, required=False, allow_null=True)


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""
    
    email = serializers.EmailField()
    display_name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    
    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'As senhas não coincidem.'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""
    
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.choices)


class UserBalanceFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the admin user list.

    Query Parameters:
        balance (str): 'positive' or 'negative'
    """
    
    balance = serializers.ChoiceField(
        choices=['positive', 'negative'],
        required=False
    )


class UserPublicSerializer(serializers.ModelSerializer):
    """Public user info (for rosters and payment listings)."""
    
    display_name = serializers.SerializerMethodField()
    
    class Meta:
        model = User
        fields = ['id', 'display_name', 'photo_url']
        read_only_fields = fields
    
    def get_display_name(self, obj):
        return obj.get_display_name()
