from django.contrib import admin

from .models import AuditLog, Role, User, UserRole


class UserRoleInline(admin.TabularInline):
    model = UserRole
    fk_name = 'user'
    extra = 0
    raw_id_fields = ['assigned_by']
    readonly_fields = ['assigned_at']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'username', 'phone_number', 'district', 'is_active', 'created_at']
    list_filter = ['is_active', 'is_superuser', 'roles']
    search_fields = ['email', 'username', 'phone_number']
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'failed_login_attempts', 'account_locked_until']
    exclude = ['password', 'groups', 'user_permissions']
    inlines = [UserRoleInline]

    def save_formset(self, request, form, formset, change):
        # Record which administrator granted each role.
        for membership in formset.save(commit=False):
            if membership.assigned_by_id is None:
                membership.assigned_by = request.user
            membership.save()
        for membership in formset.deleted_objects:
            membership.delete()


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'display_name', 'is_active']
    list_filter = ['is_active']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'action', 'resource_type', 'resource_id', 'user', 'status']
    list_filter = ['action', 'resource_type', 'status']
    search_fields = ['resource_id', 'user__email', 'request_path']
    date_hierarchy = 'timestamp'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
