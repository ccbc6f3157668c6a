from django.urls import path

from . import views

app_name = 'access'

urlpatterns = [
    path('api-keys/', views.api_keys, name='api_keys'),
    path('api-keys/<int:pk>/', views.revoke_api_key, name='revoke_api_key'),
]
