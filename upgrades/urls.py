from django.urls import path

from . import views

app_name = 'upgrades'

urlpatterns = [
    path('', views.upgrades, name='upgrades'),
    path('prices/', views.prices, name='prices'),
    path('<int:upgrade_id>/', views.remove_upgrade, name='remove'),
]
