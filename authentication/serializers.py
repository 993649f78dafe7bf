"""
Account serializers: registration, login, and the customer profile the
checkout form is pre-filled from.
"""

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from .models import Role, User, UserRole
from .permissions import is_admin

PROFILE_FIELDS = ["first_name", "last_name", "phone_number", "district", "area", "address"]


class RoleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Role
        fields = ["id", "name", "display_name", "is_active"]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    roles = RoleSerializer(many=True, read_only=True)
    isAdmin = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "email", "username", *PROFILE_FIELDS, "roles", "isAdmin", "created_at"]
        read_only_fields = fields

    def get_isAdmin(self, user) -> bool:
        return is_admin(user)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a customer may change on their own account."""

    class Meta:
        model = User
        fields = PROFILE_FIELDS
        extra_kwargs = {name: {"required": False} for name in PROFILE_FIELDS}

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError(_("No valid fields to update"))
        return attrs


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    password_confirm = serializers.CharField(write_only=True, style={"input_type": "password"})

    class Meta:
        model = User
        fields = ["email", "username", *PROFILE_FIELDS, "password", "password_confirm"]

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        if attrs["password"] != attrs.pop("password_confirm"):
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match.")})
        validate_password(attrs["password"])
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User.objects.create_user(password=password, **validated_data)

        # Storefront sign-ups are customers; back-office roles are granted in
        # the admin only.
        role_name = getattr(settings, "DEFAULT_CUSTOMER_ROLE", None)
        if role_name:
            role, _created = Role.objects.get_or_create(
                name=role_name,
                defaults={"display_name": role_name.title()},
            )
            if role.is_active:
                UserRole.objects.get_or_create(user=user, role=role)
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate(self, attrs):
        email = attrs["email"].strip().lower()
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise AuthenticationFailed(_("Invalid credentials."), code="authorization")

        if user.is_account_locked:
            raise AuthenticationFailed(
                _("Account locked due to repeated failures. Try again at %(datetime)s.")
                % {"datetime": timezone.localtime(user.account_locked_until)},
                code="account_locked",
            )

        authenticated = authenticate(self.context.get("request"), username=email, password=attrs["password"])
        if authenticated is None:
            self._record_failure(user)
            raise AuthenticationFailed(_("Invalid credentials."), code="authorization")

        if user.failed_login_attempts:
            user.reset_failed_logins()
        attrs["user"] = authenticated
        return attrs

    @staticmethod
    def _record_failure(user):
        user.failed_login_attempts += 1
        user.last_failed_login = timezone.now()
        user.save(update_fields=["failed_login_attempts", "last_failed_login"])

        if user.failed_login_attempts >= getattr(settings, "AUTH_LOCKOUT_THRESHOLD", 5):
            user.lock_account(getattr(settings, "AUTH_LOCKOUT_MINUTES", 15))
