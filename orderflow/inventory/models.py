from django.db import models
from orderflow.ledger.models import StockRow, StockTxn
from orderflow.locations.models import InventoryLocation


class InventoryItem(models.Model):
    """Raw material consumed by production (resin, gelcoat, fittings...)"""
    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=200)
    unit = models.CharField(max_length=20, default='ea')
    min_stock = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.sku} - {self.name}"

    class Meta:
        db_table = 'inventory_items'
        ordering = ['name']


class InventoryStock(StockRow):
    """On-hand quantity of one item at one location"""
    item = models.ForeignKey(InventoryItem, on_delete=models.PROTECT, related_name='stocks')
    location = models.ForeignKey(InventoryLocation, on_delete=models.PROTECT, related_name='stocks')

    @property
    def is_low(self):
        return self.quantity < self.item.min_stock

    def __str__(self):
        return f"{self.item.sku} @ {self.location.name}: {self.quantity}"

    class Meta:
        db_table = 'inventory_stocks'
        ordering = ['item__name', 'location__name']
        constraints = [
            models.UniqueConstraint(fields=['item', 'location'], name='uniq_inventory_stock_item_location'),
        ]


class InventoryTxn(StockTxn):
    stock = models.ForeignKey(InventoryStock, on_delete=models.PROTECT, related_name='txns')

    def __str__(self):
        return f"{self.kind} {self.delta:+d} on {self.stock_id}"

    class Meta(StockTxn.Meta):
        db_table = 'inventory_txns'
        indexes = [
            models.Index(fields=['stock', 'created_at'], name='idx_inv_txn_stock_created'),
        ]
