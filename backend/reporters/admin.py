from django.contrib import admin

from .models import Reporter, ReporterDesignation


@admin.register(ReporterDesignation)
class ReporterDesignationAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "level", "tenant")
    search_fields = ("name", "code")
    list_filter = ("level", "tenant")


@admin.register(Reporter)
class ReporterAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "tenant", "designation", "level",
                    "subscription_active", "kyc_status", "active")
    search_fields = ("user__mobile_number", "user__profile__full_name")
    list_filter = ("tenant", "level", "kyc_status", "subscription_active", "active")
    raw_id_fields = ("user", "state", "district", "mandal", "assembly_constituency")
    readonly_fields = ("created_at", "updated_at")
