from django.urls import path

from . import views

app_name = "decisions"

urlpatterns = [
    path("me/", views.AdminProfileView.as_view(), name="admin-profile"),
    path(
        "public-servant-pass/vet/",
        views.PublicServantPassActionView.as_view(action_name="vet"),
        name="psp-vet",
    ),
    path(
        "public-servant-pass/approve/",
        views.PublicServantPassActionView.as_view(action_name="approve"),
        name="psp-approve",
    ),
    path(
        "public-servant-pass/reject/",
        views.PublicServantPassActionView.as_view(action_name="reject"),
        name="psp-reject",
    ),
    path(
        "public-servant-pass/request-info/",
        views.PublicServantPassActionView.as_view(action_name="request-info"),
        name="psp-request-info",
    ),
    path(
        "applications/<uuid:pk>/verify-documents/",
        views.VerifyDocumentsView.as_view(),
        name="verify-documents",
    ),
    path(
        "applications/<uuid:pk>/workflow/",
        views.WorkflowStatusView.as_view(),
        name="workflow-status",
    ),
    path(
        "applications/<uuid:pk>/<str:action>/",
        views.ApplicationActionView.as_view(),
        name="application-action",
    ),
]
