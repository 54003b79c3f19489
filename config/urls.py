"""
URL configuration for the to-do API.
"""
from django.contrib import admin
from django.http import HttpRequest, HttpResponse
from django.urls import path
from ninja import NinjaAPI

from apps.core.errors import register_exception_handlers

api = NinjaAPI(
    title="ToDo API",
    version="1.0.0",
    description="API for managing todos",
    docs_url="/docs",
)
register_exception_handlers(api)

from apps.identity.api import router as identity_router
from apps.todos.api import router as todos_router

api.add_router("/auth", identity_router)
api.add_router("/todos", todos_router)


def index(request: HttpRequest) -> HttpResponse:
    return HttpResponse("Welcome to the ToDo API", content_type="text/plain")


urlpatterns = [
    path('', index, name='index'),
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
