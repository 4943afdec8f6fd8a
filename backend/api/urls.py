from django.urls import re_path

from . import views

app_name = "api"

# Trailing slashes are optional: the catch-all below would otherwise answer
# before APPEND_SLASH could redirect.
urlpatterns = [
    re_path(r"^health/?$", views.health, name="health"),
    re_path(r"^navigation/?$", views.navigation, name="navigation"),
    re_path(r"^app-mode/?$", views.app_mode, name="app_mode"),
    re_path(r"^auth/user/?$", views.current_user, name="current_user"),
    re_path(r"^.*$", views.not_found, name="not_found"),
]
