from django.conf import settings
from django.contrib import admin
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include
from django.urls import path
from django.views import defaults as default_views
from drf_spectacular.views import SpectacularAPIView
from drf_spectacular.views import SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView
from rest_framework_simplejwt.views import TokenVerifyView

from travelxguide.users.api.auth_views import CookieJWTRefreshView

from .health import health as health_view

AUTH_URLS = "travelxguide.users.api.auth_urls"

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path("health/", health_view, name="health"),
]

# Versioned API. JWT views are mounted explicitly next to the auth routes
# so the schema groups them under their own tag.
urlpatterns += [
    path("api/v1/", include(("config.api_router", "api"), namespace="api_v1")),
    path("api/v1/auth/", include((AUTH_URLS, "auth"), namespace="auth_v1")),
    path(
        "api/v1/auth/jwt/create/",
        TokenObtainPairView.as_view(),
        name="jwt-create",
    ),
    path(
        "api/v1/auth/jwt/refresh/",
        CookieJWTRefreshView.as_view(),
        name="jwt-refresh",
    ),
    path("api/v1/auth/jwt/verify/", TokenVerifyView.as_view(), name="jwt-verify"),
    path("api/v1/schema/", SpectacularAPIView.as_view(), name="api-schema-v1"),
    path(
        "api/v1/docs/",
        SpectacularSwaggerView.as_view(url_name="api-schema-v1"),
        name="api-docs-v1",
    ),
]

# Unversioned aliases used by the existing React client (`/api/auth/login`,
# `/api/tours/...`). Hidden from the schema by config.schema.drop_legacy_routes.
urlpatterns += [
    path("api/", include(("config.api_router", "api"), namespace="api")),
    path("api/auth/", include((AUTH_URLS, "auth"), namespace="auth")),
]

if settings.DEBUG:
    urlpatterns += staticfiles_urlpatterns()
    # Preview the error pages during development
    urlpatterns += [
        path(
            "400/",
            default_views.bad_request,
            kwargs={"exception": Exception("Bad Request!")},
        ),
        path(
            "403/",
            default_views.permission_denied,
            kwargs={"exception": Exception("Permission Denied")},
        ),
        path(
            "404/",
            default_views.page_not_found,
            kwargs={"exception": Exception("Page not Found")},
        ),
        path("500/", default_views.server_error),
    ]
