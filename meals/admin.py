from django.contrib import admin

from .models import DeliveryGroup, PauseAuditEntry, ScheduledMeal


class PauseAuditInline(admin.TabularInline):
    model = PauseAuditEntry
    extra = 0
    can_delete = False
    readonly_fields = ('previous_state', 'new_state', 'actor', 'timestamp')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ScheduledMeal)
class ScheduledMealAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscription', 'service_date', 'item_type', 'delivery_slot', 'is_paused', 'delivery_group', 'upgrade')
    list_filter = ('service_date', 'item_type', 'is_paused')
    raw_id_fields = ('subscription', 'delivery_group', 'upgrade')
    inlines = [PauseAuditInline]


@admin.register(DeliveryGroup)
class DeliveryGroupAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscriber', 'service_date', 'delivery_slot', 'created_at')
    list_filter = ('service_date', 'delivery_slot')
    raw_id_fields = ('subscriber',)


@admin.register(PauseAuditEntry)
class PauseAuditEntryAdmin(admin.ModelAdmin):
    list_display = ('scheduled_meal', 'previous_state', 'new_state', 'actor', 'timestamp')
    readonly_fields = ('scheduled_meal', 'previous_state', 'new_state', 'actor', 'timestamp')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
