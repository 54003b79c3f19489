from django.contrib import admin
from .models import Todo


@admin.register(Todo)
class TodoAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'owner_id', 'created_at']
    list_filter = ['status']
    search_fields = ['title', 'description', 'owner_id']
