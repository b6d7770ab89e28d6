from django.contrib import admin

from .models import CurryOrder, CurryPackage, CurryWallet, TokenPurchase


@admin.register(CurryPackage)
class CurryPackageAdmin(admin.ModelAdmin):
    list_display = ('name', 'diet_type', 'token_count', 'validity_days', 'price', 'is_active')
    list_filter = ('diet_type', 'is_active')


class TokenPurchaseInline(admin.TabularInline):
    model = TokenPurchase
    extra = 0
    can_delete = False
    readonly_fields = ('package', 'tokens_added', 'price_paid', 'valid_until_before', 'valid_until_after', 'purchased_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CurryWallet)
class CurryWalletAdmin(admin.ModelAdmin):
    list_display = ('subscriber', 'diet_type', 'total_tokens', 'used_tokens', 'valid_until')
    list_filter = ('diet_type',)
    search_fields = ('subscriber__username', 'subscriber__email')
    raw_id_fields = ('subscriber',)
    # Balances move only through the ledger
    readonly_fields = ('total_tokens', 'used_tokens')
    inlines = [TokenPurchaseInline]


@admin.register(CurryOrder)
class CurryOrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscriber', 'order_date', 'item_type', 'delivery_slot', 'status', 'delivery_group')
    list_filter = ('status', 'item_type', 'order_date')
    raw_id_fields = ('subscriber', 'wallet', 'delivery_group')
