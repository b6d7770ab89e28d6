from django.contrib import admin

from .models import MealPackage, Subscription


@admin.register(MealPackage)
class MealPackageAdmin(admin.ModelAdmin):
    list_display = (
        'name', 'diet_type', 'cuisine_type', 'duration_days', 'price',
        'allows_diet_upgrade', 'allows_cuisine_upgrade', 'allows_container_choice', 'is_active',
    )
    list_filter = ('diet_type', 'cuisine_type', 'is_active')


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscriber', 'meal_package', 'start_date', 'end_date', 'status')
    list_filter = ('status',)
    search_fields = ('subscriber__username', 'subscriber__email')
    raw_id_fields = ('subscriber', 'address')
