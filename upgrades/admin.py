from django.contrib import admin

from .models import SubscriptionUpgrade, UpgradePriceRule


@admin.register(UpgradePriceRule)
class UpgradePriceRuleAdmin(admin.ModelAdmin):
    list_display = ('upgrade_type', 'scope', 'meal_type', 'price', 'updated_at')
    list_filter = ('upgrade_type', 'scope')


@admin.register(SubscriptionUpgrade)
class SubscriptionUpgradeAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscription', 'upgrade_type', 'scope', 'meal_type', 'start_date', 'end_date', 'total_price')
    list_filter = ('upgrade_type', 'scope')
    raw_id_fields = ('subscription',)
