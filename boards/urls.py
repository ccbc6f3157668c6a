from django.urls import path
from . import views

app_name = 'boards'

urlpatterns = [
    # Boards
    path('boards/', views.board_collection, name='board_collection'),
    path('boards/<int:pk>/', views.board_detail, name='board_detail'),
    path('boards/<int:pk>/archive/', views.archive_board, name='archive_board'),
    path('boards/<int:pk>/restore/', views.restore_board, name='restore_board'),
    path('boards/<int:pk>/heatmap/', views.board_heatmap_view, name='board_heatmap'),
    path('boards/<int:pk>/stats/', views.board_stats_view, name='board_stats'),

    # Check-ins
    path('boards/<int:board_id>/check-ins/', views.board_check_ins, name='board_check_ins'),
    path('check-ins/<int:pk>/', views.check_in_detail, name='check_in_detail'),

    # Quick actions
    path('quick/check-in/', views.quick_check_in, name='quick_check_in'),
    path('quick/status/', views.quick_status_view, name='quick_status'),

    # Current user
    path('users/me/', views.current_user, name='current_user'),
    path('users/me/dashboard/', views.dashboard, name='dashboard'),
]
