"""DRF views for citizen submissions, limit checks and bulk deletion."""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.responses import error_response, first_error
from apps.users.constants import BULK_DELETE_ROLES
from apps.users.permissions import AdminLookupError, resolve_admin, user_has_any_role

from . import limits, store
from .constants import PUBLIC_SERVANT_PASS
from .exceptions import ApplicationNotFound, StoreError
from .serializers import (
    ApplicationListQuerySerializer,
    ApplicationSerializer,
    BulkDeleteSerializer,
    LimitCheckSerializer,
    PublicServantValidationSerializer,
    SubmitApplicationSerializer,
)
from .services import bulk_delete, preview_bulk_delete, submit_application



class ApplicationListView(APIView):
    """List a user's applications or submit a new one."""

    def get(self, request, *args, **kwargs):  # type: ignore[override]
        query = ApplicationListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return error_response(first_error(query.errors), status.HTTP_400_BAD_REQUEST)

        try:
            applications = store.get_user_applications(query.validated_data["userId"])
        except StoreError as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response({"applications": ApplicationSerializer(applications, many=True).data})

    def post(self, request, *args, **kwargs):  # type: ignore[override]
        serializer = SubmitApplicationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(first_error(serializer.errors), status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = submit_application(data["userId"], data["serviceName"], data["applicationData"])

        if result.error:
            return error_response(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if not result.success:
            return Response(
                {"error": result.limit.reason, **result.limit.as_dict()},
                status=status.HTTP_409_CONFLICT,
            )

        return Response(
            {
                "success": True,
                "message": f"{data['serviceName']} application submitted successfully",
                "data": ApplicationSerializer(result.application).data,
            },
            status=status.HTTP_201_CREATED,
        )


class ApplicationDetailView(APIView):
    def get(self, request, pk, *args, **kwargs):  # type: ignore[override]
        try:
            application = store.get_application_by_id(pk)
        except ApplicationNotFound:
            return error_response("Application not found", status.HTTP_404_NOT_FOUND)
        except StoreError as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(ApplicationSerializer(application).data)


class ApplicationLimitsView(APIView):
    """Answer whether a user may apply for a service."""

    def post(self, request, *args, **kwargs):  # type: ignore[override]
        serializer = LimitCheckSerializer(data=request.data)
        if not serializer.is_valid() or not serializer.validated_data.get("serviceName"):
            return error_response(
                "Missing required fields: userId and serviceName",
                status.HTTP_400_BAD_REQUEST,
            )

        data = serializer.validated_data
        result = limits.can_apply_for_service(data["userId"], data["serviceName"])
        return Response(result.as_dict())

    def get(self, request, *args, **kwargs):  # type: ignore[override]
        user_id = request.query_params.get("userId")
        service_name = request.query_params.get("serviceName")

        if not user_id:
            return error_response("Missing required parameter: userId", status.HTTP_400_BAD_REQUEST)

        if service_name:
            return Response(limits.can_apply_for_service(user_id, service_name).as_dict())

        try:
            applications = limits.get_all_user_applications(user_id)
        except StoreError as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

        counts = limits.summarise_counts(applications)
        return Response(
            {
                "applications": applications,
                "totalCount": counts["total"],
                "byService": counts["byService"],
                "byStatus": counts["byStatus"],
            }
        )


class PublicServantPassValidationView(APIView):
    """Pre-submission check for a Public Servant Pass application."""

    def post(self, request, *args, **kwargs):  # type: ignore[override]
        serializer = PublicServantValidationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(first_error(serializer.errors), status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        result = limits.check_service_specific_limits(
            data["userId"], PUBLIC_SERVANT_PASS, data["applicationData"]
        )
        return Response(result.as_dict())


class BulkDeleteView(APIView):
    """Preview (GET) or execute (DELETE) a bulk deletion of applications."""

    def get(self, request, *args, **kwargs):  # type: ignore[override]
        serializer = BulkDeleteSerializer(data=request.query_params)
        if not serializer.is_valid():
            return error_response(first_error(serializer.errors), status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            payload = preview_bulk_delete(
                data["deleteScope"],
                user_id=data.get("userId") or None,
                service_name=data.get("serviceName") or None,
            )
        except StoreError as exc:
            return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(payload)

    def delete(self, request, *args, **kwargs):  # type: ignore[override]
        params = request.data if request.data else request.query_params
        serializer = BulkDeleteSerializer(data=params)
        if not serializer.is_valid():
            return error_response(first_error(serializer.errors), status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        scope = data["deleteScope"]
        user_id = data.get("userId") or None
        service_name = data.get("serviceName") or None

        admin = None
        if data.get("adminId"):
            try:
                admin = resolve_admin(
                    data["adminId"],
                    check=lambda user: user_has_any_role(user, BULK_DELETE_ROLES),
                    denied_message="Unauthorized: Admin permissions required",
                )
            except AdminLookupError as exc:
                return error_response(exc.message, exc.status_code)

        if scope == "service" and service_name and admin is None:
            return error_response(
                "Admin permissions required to delete service applications",
                status.HTTP_403_FORBIDDEN,
            )
        if not (
            (scope == "user" and user_id)
            or (scope == "all" and admin is not None)
            or (scope == "service" and service_name)
        ):
            return error_response("Invalid request parameters", status.HTTP_400_BAD_REQUEST)

        try:
            summary = bulk_delete(scope, user_id=user_id, service_name=service_name, actor=admin)
        except StoreError as exc:
            return error_response(
                f"Failed to fetch applications: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        if summary.all_failed:
            return error_response(
                "Failed to delete any applications",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                **summary.as_dict(),
            )

        return Response({"success": True, "message": summary.message, **summary.as_dict()})
