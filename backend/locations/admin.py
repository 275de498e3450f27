from django.contrib import admin

from .models import AssemblyConstituency, District, Mandal, State


@admin.register(State)
class StateAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_deleted")
    search_fields = ("name", "code")
    list_filter = ("is_deleted",)


@admin.register(District)
class DistrictAdmin(admin.ModelAdmin):
    list_display = ("name", "state", "is_deleted")
    search_fields = ("name",)
    list_filter = ("state", "is_deleted")


@admin.register(Mandal)
class MandalAdmin(admin.ModelAdmin):
    list_display = ("name", "district", "is_deleted")
    search_fields = ("name",)
    list_filter = ("district__state", "is_deleted")


@admin.register(AssemblyConstituency)
class AssemblyConstituencyAdmin(admin.ModelAdmin):
    list_display = ("name", "district", "is_deleted")
    search_fields = ("name",)
    list_filter = ("district__state", "is_deleted")
