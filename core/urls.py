from django.contrib import admin
from django.urls import path

admin.site.site_header = "CRM"
admin.site.site_title = "CRM back office"
admin.site.index_title = "Clients, projects & quotes"

urlpatterns = [
    path("admin/", admin.site.urls),
]
