from django.urls import path

from . import views

app_name = 'meals'

urlpatterns = [
    path('schedule/', views.meal_schedule, name='schedule'),
    path('<int:meal_id>/pause/', views.set_meal_state, name='pause'),
    path('<int:meal_id>/pause-history/', views.pause_history, name='pause_history'),
    path('groups/', views.create_group, name='create_group'),
    path('groups/<int:group_id>/', views.delete_group, name='delete_group'),
]
