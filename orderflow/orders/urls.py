from django.urls import path
from .views import (
    order_list_create, order_detail, order_status, order_requirements,
    order_history, order_history_comment, order_media,
    order_schedule, order_factory,
    notification_list, notification_read,
)

urlpatterns = [
    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', order_status, name='order-status'),
    path('orders/<int:pk>/requirements/', order_requirements, name='order-requirements'),
    path('orders/<int:pk>/history/', order_history, name='order-history'),
    path('orders/<int:pk>/history/comment/', order_history_comment, name='order-history-comment'),
    path('orders/<int:pk>/media/', order_media, name='order-media'),
    path('orders/<int:pk>/schedule/', order_schedule, name='order-schedule'),
    path('orders/<int:pk>/factory/', order_factory, name='order-factory'),

    # Dealer notifications
    path('notifications/', notification_list, name='notification-list'),
    path('notifications/<int:pk>/read/', notification_read, name='notification-read'),
]
