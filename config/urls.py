from django.http import JsonResponse
from django.urls import include, path


def health(request):
    """Liveness check."""
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path("health", health, name="health"),
    path("api/auth/", include("accounts.urls")),
    path("api/", include("practice.urls")),
]
