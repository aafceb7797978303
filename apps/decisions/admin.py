from django.contrib import admin

from .models import ApplicationAction


@admin.register(ApplicationAction)
class ApplicationActionAdmin(admin.ModelAdmin):
    list_display = ("application", "action", "actor", "created_at")
    list_filter = ("action", "created_at")
    search_fields = ("application__reference_number", "actor__username", "notes")
