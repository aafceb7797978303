from django.urls import path

from . import views

app_name = "applications"

urlpatterns = [
    path("", views.ApplicationListView.as_view(), name="application-list"),
    path("check-limits/", views.ApplicationLimitsView.as_view(), name="check-limits"),
    path(
        "public-servant-pass/validate/",
        views.PublicServantPassValidationView.as_view(),
        name="public-servant-pass-validate",
    ),
    path("bulk-delete/", views.BulkDeleteView.as_view(), name="bulk-delete"),
    path("<uuid:pk>/", views.ApplicationDetailView.as_view(), name="application-detail"),
]
