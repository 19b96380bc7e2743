from django.contrib import admin
from factory_users.models import FactoryUser


@admin.register(FactoryUser)
class FactoryUserAdmin(admin.ModelAdmin):
    list_display = ['username', 'name', 'role', 'is_active', 'is_staff', 'created_at']
    list_filter = ['role', 'is_active']
    search_fields = ['username', 'name']
    readonly_fields = ['id', 'last_login', 'created_at', 'updated_at']
    exclude = ['password']
