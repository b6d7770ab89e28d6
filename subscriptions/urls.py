from django.urls import path

from . import views

app_name = 'subscriptions'

urlpatterns = [
    path('', views.create_subscription, name='create'),
    path('packages/', views.packages, name='packages'),
    path('active/', views.active_subscription, name='active'),
    path('<int:subscription_id>/end/', views.end_subscription, name='end'),
]
