"""Admin registrations for the users app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from apps.users import roles
from apps.users.models import User


@admin.register(User)
class PortalUserAdmin(UserAdmin):
    list_display = ("username", "name", "email", "role", "admin_level", "is_active")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("username", "name", "email", "national_id")
    fieldsets = UserAdmin.fieldsets + (
        ("Portal profile", {"fields": ("name", "role", "national_id", "phone", "photo_url")}),
    )

    @admin.display(description="Admin level")
    def admin_level(self, obj):
        if not roles.is_admin(obj):
            return "-"
        return roles.get_admin_level_name(roles.get_admin_level(obj))
