from django.conf import settings
from django.db import models
from orderflow.catalog.models import ProductModel, Color
from orderflow.core.audit import AppendOnlyRecord
from orderflow.locations.models import Factory
from orderflow.parties.models import Dealer
from .flow import OrderStatus, INITIAL_STATUS
from .requirements import DocType


class Order(models.Model):
    """One production order placed by a dealer.

    `status` only changes through `orderflow.orders.services.request_transition`;
    saving an instance whose status was edited directly raises.
    """
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name='orders')
    product_model = models.ForeignKey(ProductModel, on_delete=models.PROTECT, related_name='orders')
    color = models.ForeignKey(Color, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    factory = models.ForeignKey(Factory, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    status = models.CharField(max_length=32, choices=OrderStatus.choices, default=INITIAL_STATUS, db_index=True)
    delivery_address = models.TextField()
    payment_proof_url = models.CharField(max_length=500, blank=True, default='')
    serial_number = models.CharField(max_length=100, blank=True, default='')
    requested_ship_date = models.DateField(null=True, blank=True)
    production_priority = models.PositiveSmallIntegerField(null=True, blank=True)
    shipping_method = models.CharField(max_length=50, blank=True, default='')
    hardware_skimmer = models.BooleanField(default=False)
    hardware_returns = models.BooleanField(default=False)
    hardware_autocover = models.BooleanField(default=False)
    hardware_main_drains = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        loaded = dict(zip(field_names, values))
        if 'status' in loaded:
            instance._loaded_status = loaded['status']
        return instance

    def refresh_from_db(self, using=None, fields=None, **kwargs):
        super().refresh_from_db(using=using, fields=fields, **kwargs)
        if fields is None or 'status' in fields:
            self._loaded_status = self.status

    def save(self, *args, **kwargs):
        if self._state.adding:
            if self.status != INITIAL_STATUS:
                raise ValueError(f"Orders are created in {INITIAL_STATUS}")
        elif self.status != getattr(self, '_loaded_status', self.status):
            raise ValueError('Order status changes go through request_transition()')
        super().save(*args, **kwargs)
        self._loaded_status = self.status

    def _apply_status(self, status):
        self.status = status
        self._loaded_status = status
        self.save(update_fields=['status', 'updated_at'])

    def __str__(self):
        return f"Order #{self.pk}"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['dealer', 'status'], name='idx_order_dealer_status'),
            models.Index(fields=['factory', 'status'], name='idx_order_factory_status'),
        ]


class OrderHistory(AppendOnlyRecord):
    """One row per accepted status change"""
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='history')
    status = models.CharField(max_length=32, choices=OrderStatus.choices)
    comment = models.TextField(blank=True)
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='order_history')

    class Meta:
        db_table = 'order_history'
        ordering = ['created_at', 'id']


class OrderMedia(models.Model):
    """Uploaded attachment; the file itself lives in the external blob store"""
    TYPE_CHOICES = [
        ('photo', 'Photo'),
        ('proof', 'Proof'),
        ('note', 'Note'),
        ('update', 'Update'),
    ]

    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='media')
    file_url = models.CharField(max_length=1000)
    media_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='update')
    doc_type = models.CharField(max_length=40, choices=DocType.choices, null=True, blank=True)
    visible_to_dealer = models.BooleanField(default=True)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='uploaded_media')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_media'
        ordering = ['-uploaded_at']
        indexes = [
            models.Index(fields=['order', 'doc_type'], name='idx_media_order_doctype'),
        ]


class Notification(models.Model):
    """In-app notification for a dealer"""
    dealer = models.ForeignKey(Dealer, on_delete=models.CASCADE, related_name='notifications')
    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    title = models.CharField(max_length=200)
    message = models.TextField()
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
