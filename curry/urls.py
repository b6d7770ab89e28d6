from django.urls import path

from . import views

app_name = 'curry'

urlpatterns = [
    path('packages/', views.packages, name='packages'),
    path('purchase/', views.purchase_tokens, name='purchase'),
    path('wallets/', views.wallets, name='wallets'),
    path('purchases/', views.purchases, name='purchases'),
    path('orders/', views.orders, name='orders'),
    path('orders/<int:order_id>/', views.cancel_order, name='cancel_order'),
    path('orders/<int:order_id>/fulfil/', views.fulfil_order, name='fulfil_order'),
]
