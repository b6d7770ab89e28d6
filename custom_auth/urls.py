from django.urls import path
from . import views

app_name = 'custom_auth'

urlpatterns = [
    path('api/user_details/', views.user_details_view, name='user_details'),
    path('api/addresses/', views.addresses, name='addresses'),
]
