from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Role, User, UserProfile


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "hierarchy_level", "description")
    search_fields = ("name",)
    ordering = ("-hierarchy_level",)


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "mobile_number", "preferred_language",
                    "is_active", "role")
    search_fields = ("username", "mobile_number", "profile__full_name")
    list_filter = ("is_active", "is_staff", "role")
    filter_horizontal = ("groups", "user_permissions")
    inlines = (UserProfileInline,)
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Extra Info", {"fields": ("mobile_number", "preferred_language", "role")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Extra Info", {"fields": ("mobile_number", "preferred_language", "role")}),
    )
