"""Request payload serializers for the admin workflow endpoints."""

from __future__ import annotations

from rest_framework import serializers

CLEARANCE_LEVELS = ("basic", "confidential", "secret")
RECOMMENDED_ACTIONS = ("approve", "reject", "request_more_info")


class VettingDataSerializer(serializers.Serializer):
    employmentVerified = serializers.BooleanField()
    emailVerified = serializers.BooleanField()
    backgroundCheckRequired = serializers.BooleanField()
    securityClearanceLevel = serializers.ChoiceField(choices=CLEARANCE_LEVELS, required=False)
    vettingNotes = serializers.CharField(required=False, allow_blank=True)
    interviewRequired = serializers.BooleanField(required=False)
    recommendedAction = serializers.ChoiceField(choices=RECOMMENDED_ACTIONS)


class _AdminActionSerializer(serializers.Serializer):
    adminId = serializers.CharField(required=False, allow_blank=True)


class VetRequestSerializer(_AdminActionSerializer):
    vettingData = serializers.DictField()


class ApproveRequestSerializer(_AdminActionSerializer):
    adminNote = serializers.CharField(required=False, allow_blank=True, default="")


class RejectRequestSerializer(_AdminActionSerializer):
    reason = serializers.CharField()


class RequestInfoSerializer(_AdminActionSerializer):
    details = serializers.CharField()


class DocumentVerificationSerializer(serializers.Serializer):
    verified_by = serializers.CharField(
        error_messages={"required": "Verified by admin ID is required"}
    )
    national_id_verified = serializers.BooleanField(required=False)
    address_proof_verified = serializers.BooleanField(required=False)
    category_doc_verified = serializers.BooleanField(required=False)
    complete = serializers.BooleanField(required=False, default=False)
