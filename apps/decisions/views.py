"""Admin workflow endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Type

from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.permissions import IsPortalAdmin
from apps.api.responses import error_response, first_error
from apps.applications import store
from apps.applications.constants import PUBLIC_SERVANT_PASS
from apps.applications.exceptions import ApplicationNotFound, StoreError
from apps.applications.serializers import ApplicationSerializer
from apps.users import roles
from apps.users.permissions import AdminLookupError, resolve_admin

from . import services
from .serializers import (
    ApproveRequestSerializer,
    DocumentVerificationSerializer,
    RejectRequestSerializer,
    RequestInfoSerializer,
    VetRequestSerializer,
)


@dataclass(frozen=True)
class WorkflowAction:
    serializer_class: Type[serializers.Serializer]
    check: Callable[[Any], bool]
    denied_message: str
    success_message: str
    missing_message: str
    perform: Callable[..., services.WorkflowResult]


def _can_request_info(user) -> bool:
    return roles.can_vet(user) or roles.can_approve(user)


WORKFLOW_ACTIONS = {
    "vet": WorkflowAction(
        serializer_class=VetRequestSerializer,
        check=roles.can_vet,
        denied_message="Unauthorized: Vetting permissions required",
        success_message="{service} application vetted successfully",
        missing_message="Missing required fields: applicationId, adminId, and vettingData",
        perform=lambda pk, admin, data, service: services.vet_application(
            pk, data["vettingData"], admin, service_name=service
        ),
    ),
    "approve": WorkflowAction(
        serializer_class=ApproveRequestSerializer,
        check=roles.can_approve,
        denied_message="Unauthorized: Approval permissions required",
        success_message="{service} approved successfully",
        missing_message="Missing required fields: applicationId and adminId",
        perform=lambda pk, admin, data, service: services.approve_application(
            pk, admin, data.get("adminNote", ""), service_name=service
        ),
    ),
    "reject": WorkflowAction(
        serializer_class=RejectRequestSerializer,
        check=roles.can_approve,
        denied_message="Unauthorized: Approval permissions required",
        success_message="{service} application rejected",
        missing_message="Missing required fields: applicationId, adminId, and reason",
        perform=lambda pk, admin, data, service: services.reject_application(
            pk, admin, data["reason"], service_name=service
        ),
    ),
    "request-info": WorkflowAction(
        serializer_class=RequestInfoSerializer,
        check=_can_request_info,
        denied_message="Unauthorized: Admin access required",
        success_message="More information requested for {service} application",
        missing_message="Missing required fields: applicationId, adminId, and details",
        perform=lambda pk, admin, data, service: services.request_more_info(
            pk, admin, data["details"], service_name=service
        ),
    ),
}


def run_workflow_action(request, action_name: str, application_id: Any, *, service_name=None):
    """Validate, authorise and execute ``action_name`` for ``application_id``."""

    action = WORKFLOW_ACTIONS.get(action_name)
    if action is None:
        return error_response(f"Unknown workflow action: {action_name}", status.HTTP_404_NOT_FOUND)

    serializer = action.serializer_class(data=request.data)
    if not application_id or not serializer.is_valid():
        return error_response(action.missing_message, status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        admin = resolve_admin(
            data.get("adminId"),
            request=request,
            check=action.check,
            denied_message=action.denied_message,
        )
    except AdminLookupError as exc:
        return error_response(exc.message, exc.status_code)

    result = action.perform(application_id, admin, data, service_name)
    if not result.success:
        return error_response(result.error, status.HTTP_400_BAD_REQUEST)

    payload = {
        "success": True,
        "message": action.success_message.format(
            service=service_name or result.data.service_name
        ),
        "data": ApplicationSerializer(result.data).data,
    }
    if result.reference_number:
        payload["referenceNumber"] = result.reference_number
    if action_name == "vet":
        payload["vettingData"] = result.data.application_data.get("vettingInfo")
    return Response(payload)


class PublicServantPassActionView(APIView):
    """Public Servant Pass workflow endpoint; ``action`` is set in the URLconf."""

    action_name: str = ""

    def post(self, request, *args, **kwargs):  # type: ignore[override]
        return run_workflow_action(
            request,
            self.action_name,
            request.data.get("applicationId"),
            service_name=PUBLIC_SERVANT_PASS,
        )


class ApplicationActionView(APIView):
    """Workflow endpoint usable for any service."""

    def post(self, request, pk, action, *args, **kwargs):  # type: ignore[override]
        return run_workflow_action(request, action, pk)


class VerifyDocumentsView(APIView):
    def patch(self, request, pk, *args, **kwargs):  # type: ignore[override]
        serializer = DocumentVerificationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(first_error(serializer.errors), status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            admin = resolve_admin(
                data["verified_by"],
                check=roles.can_vet,
                denied_message="Insufficient permissions: Admin access required",
            )
        except AdminLookupError as exc:
            return error_response(exc.message, exc.status_code)

        result = services.verify_documents(pk, admin, data, complete=data.get("complete", False))
        if not result.success:
            code = (
                status.HTTP_404_NOT_FOUND
                if result.error == "Application not found"
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            return error_response(result.error, code)

        verifications = result.data.application_data.get("documentVerifications", {})
        return Response(
            {
                "message": "Document verification updated successfully",
                "data": {
                    **ApplicationSerializer(result.data).data,
                    "verifiedBy": admin.display_name,
                    "verifiedAt": verifications.get("verified_at"),
                },
            }
        )


class WorkflowStatusView(APIView):
    def get(self, request, pk, *args, **kwargs):  # type: ignore[override]
        try:
            admin = resolve_admin(
                request.query_params.get("adminId"),
                request=request,
                check=roles.is_admin,
            )
        except AdminLookupError as exc:
            return error_response(exc.message, exc.status_code)

        try:
            application = store.get_application_by_id(pk)
        except ApplicationNotFound:
            return error_response("Application not found", status.HTTP_404_NOT_FOUND)
        except StoreError as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(services.describe_workflow(application, admin))


class AdminProfileView(APIView):
    """Describe the authenticated administrator's level."""

    permission_classes = [IsPortalAdmin]

    def get(self, request, *args, **kwargs):  # type: ignore[override]
        profile = roles.enhance_admin_user(request.user)
        profile["admin_level_name"] = roles.get_admin_level_name(profile["admin_level"])
        profile["admin_level_description"] = roles.get_admin_level_description(
            profile["admin_level"]
        )
        return Response(profile)
