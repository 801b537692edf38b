"""
Root URL configuration.

Accounts (sign in, sign up, sign out) live under /accounts/, the weekly
dashboard at the site root.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('accounts/', include('core.urls')),
    path('', include('time_tracking.urls')),
]
