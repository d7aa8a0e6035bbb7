"""
URL configuration for config project.

Only the Django admin is routed; the welfare services are consumed
through their service layer.
"""
from django.contrib import admin
from django.urls import path

urlpatterns = [
    path('admin/', admin.site.urls),
]
