from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Extended user model carrying the role resolved at the auth boundary"""
    ROLE_DEALER = 'DEALER'
    ROLE_ADMIN = 'ADMIN'
    ROLE_SUPERADMIN = 'SUPERADMIN'
    ROLE_CHOICES = [
        (ROLE_DEALER, 'Dealer'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_SUPERADMIN, 'Super Admin'),
    ]
    ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPERADMIN)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_DEALER)
    dealer = models.ForeignKey('parties.Dealer', on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_admin_role(self):
        return self.role in self.ADMIN_ROLES or self.is_superuser

    class Meta:
        db_table = 'users'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('order_create', 'Order Created'),
        ('order_update', 'Order Updated'),
        ('order_status_change', 'Order Status Changed'),
        ('order_comment', 'Order Comment'),
        ('order_schedule', 'Order Scheduled'),
        ('media_add', 'Media Added'),
        ('stock_move', 'Stock Movement'),
        ('stock_count', 'Stock Count Adjustment'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order id, stock key)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]
