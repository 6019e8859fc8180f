"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from weatherhub_server.api.views import ProviderHealthView, WeatherView

urlpatterns = [
    path("weather", WeatherView.as_view(), name="weather"),
    path("admin/health", ProviderHealthView.as_view(), name="admin-health"),
]
