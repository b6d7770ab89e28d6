"""
URL configuration for tiffin_hub project.

Each core component is mounted under its own prefix; transport concerns
stop at the DRF views.
"""
from django.contrib import admin
from django.http import HttpResponse
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


urlpatterns = [
    # Simple health check endpoint for load balancers and CI smoke tests
    path('healthz/', lambda request: HttpResponse('ok'), name='healthz'),
    path('admin/', admin.site.urls),
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/', include('custom_auth.urls')),
    path('subscriptions/', include('subscriptions.urls')),
    path('meals/', include('meals.urls')),
    path('curry/', include('curry.urls')),
    path('upgrades/', include('upgrades.urls')),
]
