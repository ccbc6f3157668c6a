from django.contrib import admin
from django.urls import path, include

from boards.views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health', health_check, name='health'),
    path('v1/', include('access.urls')),
    path('v1/', include('boards.urls')),
]
