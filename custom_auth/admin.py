from django.contrib import admin
from .models import CustomUser, Address


class CustomUserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'is_staff')
    search_fields = ('username', 'email')


class AddressAdmin(admin.ModelAdmin):
    list_display = ('user', 'label', 'street', 'city', 'display_postalcode')
    search_fields = ('user__username', 'city')


admin.site.register(CustomUser, CustomUserAdmin)
admin.site.register(Address, AddressAdmin)
