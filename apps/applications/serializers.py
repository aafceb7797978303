"""Serializers for application API payloads."""

from __future__ import annotations

from rest_framework import serializers

from .constants import DELETE_SCOPES, SERVICE_CATALOGUE
from .models import Application


class ApplicationSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Application
        fields = (
            "id",
            "user_id",
            "service_name",
            "status",
            "reference_number",
            "application_data",
            "submitted_at",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ApplicationListQuerySerializer(serializers.Serializer):
    userId = serializers.IntegerField(
        min_value=1,
        error_messages={
            "required": "Missing required parameter: userId",
            "invalid": "userId must be a positive integer",
            "min_value": "userId must be a positive integer",
        },
    )


class SubmitApplicationSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    serviceName = serializers.ChoiceField(choices=SERVICE_CATALOGUE)
    applicationData = serializers.DictField(required=False, default=dict)


class LimitCheckSerializer(serializers.Serializer):
    """Validate limit checks; ``serviceName`` is filtered on, not validated."""

    userId = serializers.CharField(
        error_messages={"required": "Missing required fields: userId and serviceName"}
    )
    serviceName = serializers.CharField(
        required=False,
        allow_blank=True,
    )


class PublicServantValidationSerializer(serializers.Serializer):
    userId = serializers.CharField()
    applicationData = serializers.DictField()


class BulkDeleteSerializer(serializers.Serializer):
    deleteScope = serializers.ChoiceField(
        choices=DELETE_SCOPES,
        error_messages={
            "required": 'Invalid deleteScope. Must be "user", "all", or "service"',
            "invalid_choice": 'Invalid deleteScope. Must be "user", "all", or "service"',
        },
    )
    userId = serializers.CharField(required=False, allow_blank=True)
    serviceName = serializers.CharField(required=False, allow_blank=True)
    adminId = serializers.CharField(required=False, allow_blank=True)
