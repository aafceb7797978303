from django.contrib import admin

from .models import Application, LogEntry


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("reference_number", "service_name", "user", "status", "submitted_at")
    list_filter = ("service_name", "status")
    search_fields = ("reference_number", "user__username", "user__email")
    readonly_fields = ("id", "created_at", "updated_at")


@admin.register(LogEntry)
class LogEntryAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "level", "action", "logger_name", "user")
    list_filter = ("level", "action", "logger_name")
    search_fields = ("message",)
