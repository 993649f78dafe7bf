"""
Identity models for the bookstore API.

Accounts log in with their email address and carry role memberships that
decide what they may do: customers see only their own orders and shipments,
while the ADMIN role unlocks the back-office order management endpoints.
Security-relevant events are persisted in ``AuditLog``.
"""

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone


class Role(models.Model):
    """
    A named permission bundle. The storefront knows two: CUSTOMER, granted on
    sign-up, and ADMIN, which opens the back-office order and shipment
    endpoints.
    """

    name = models.CharField(
        max_length=32,
        unique=True,
        validators=[RegexValidator(r"^[A-Z_]{3,32}$", "Use 3-32 uppercase letters or underscores.")],
    )
    display_name = models.CharField(max_length=64)
    # Deactivating keeps memberships for the audit trail but grants nothing.
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return self.display_name or self.name


class User(AbstractUser):
    """
    Storefront account, signed in with email.

    Repeated failed sign-ins lock the account for ``AUTH_LOCKOUT_MINUTES``.
    """

    username = models.CharField(
        max_length=50,
        unique=True,
        validators=[RegexValidator(r"^[A-Za-z0-9_.-]{3,50}$", "Use 3-50 letters, digits, '_', '.' or '-'.")],
    )
    email = models.EmailField(unique=True)
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        validators=[RegexValidator(r"^\+?[0-9]{8,15}$", "Enter 8-15 digits, optionally starting with +.")],
    )
    # Saved shipping address the checkout form is pre-filled from. Orders copy
    # it at placement and never read it again.
    district = models.CharField(max_length=100, blank=True)
    area = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)
    roles = models.ManyToManyField(
        Role,
        through="UserRole",
        through_fields=('user', 'role'),
        related_name="users",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    failed_login_attempts = models.PositiveIntegerField(default=0)
    last_failed_login = models.DateTimeField(null=True, blank=True)
    account_locked_until = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    class Meta:
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.email} ({self.get_full_name() or self.username})"

    @property
    def is_account_locked(self) -> bool:
        return bool(self.account_locked_until and timezone.now() < self.account_locked_until)

    def reset_failed_logins(self) -> None:
        self.failed_login_attempts = 0
        self.last_failed_login = None
        self.account_locked_until = None
        self.save(update_fields=["failed_login_attempts", "last_failed_login", "account_locked_until"])

    def lock_account(self, minutes: int = 15) -> None:
        self.account_locked_until = timezone.now() + timedelta(minutes=minutes)
        self.save(update_fields=["account_locked_until"])

    def has_role(self, *role_names: str) -> bool:
        """
        Check whether the user holds any of the supplied active role names.
        Superusers always return True.
        """
        if self.is_superuser:
            return True
        return self.roles.filter(name__in=role_names, is_active=True).exists()


class UserRole(models.Model):
    """
    Role membership. ``assigned_by`` is empty for the CUSTOMER role granted
    on sign-up.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="role_memberships",
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name="role_memberships",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="roles_granted",
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "role")
        ordering = ("-assigned_at",)

    def __str__(self) -> str:
        return f"{self.user.email} -> {self.role.name}"


class AuditLog(models.Model):
    """
    Append-only audit trail.

    Rows come from two places: ``AuditLoggingMiddleware`` records every
    mutating API request, and the order/shipment code records domain events
    such as order creation, payment overrides and automatic reconciliation.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="CREATE, UPDATE, DELETE, RECONCILE, LOGIN, ...",
    )
    resource_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="ORDER, SHIPMENT, PRODUCT, USER, ...",
    )
    resource_id = models.CharField(max_length=100, null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_path = models.CharField(max_length=500, blank=True)
    request_method = models.CharField(max_length=10, blank=True)
    status = models.CharField(
        max_length=20,
        choices=[
            ('SUCCESS', 'Success'),
            ('FAILURE', 'Failure'),
            ('BLOCKED', 'Blocked'),
        ],
        default='SUCCESS',
        db_index=True,
    )
    metadata = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='auditlog_user_ts_idx'),
            models.Index(fields=['resource_type', 'resource_id'], name='auditlog_resource_idx'),
        ]
        verbose_name = "Audit Log"
        verbose_name_plural = "Audit Logs"

    def __str__(self):
        user_str = self.user.email if self.user else "Anonymous"
        return f"{self.action} on {self.resource_type} by {user_str} at {self.timestamp}"
