from django.db import models
from orderflow.catalog.models import ProductModel, Color
from orderflow.ledger.models import StockRow, StockTxn
from orderflow.locations.models import Factory

NO_COLOR_KEY = 'NONE'


def color_key_for(color):
    """Key column value for a color; a NULL color still needs a unique key"""
    if color is None:
        return NO_COLOR_KEY
    return str(color.pk if isinstance(color, Color) else color)


class PoolStock(StockRow):
    """Finished pools of one model/color in one condition at one factory"""
    CONDITION_READY = 'READY'
    CONDITION_RESERVED = 'RESERVED'
    CONDITION_IN_PRODUCTION = 'IN_PRODUCTION'
    CONDITION_DAMAGED = 'DAMAGED'
    CONDITION_CHOICES = [
        (CONDITION_READY, 'Ready'),
        (CONDITION_RESERVED, 'Reserved'),
        (CONDITION_IN_PRODUCTION, 'In Production'),
        (CONDITION_DAMAGED, 'Damaged'),
    ]

    factory = models.ForeignKey(Factory, on_delete=models.PROTECT, related_name='pool_stock')
    product_model = models.ForeignKey(ProductModel, on_delete=models.PROTECT, related_name='pool_stock')
    color = models.ForeignKey(Color, on_delete=models.PROTECT, null=True, blank=True, related_name='pool_stock')
    color_key = models.CharField(max_length=32, default=NO_COLOR_KEY, editable=False)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default=CONDITION_READY)
    eta = models.DateField(null=True, blank=True)

    def save(self, *args, **kwargs):
        self.color_key = color_key_for(self.color_id)
        super().save(*args, **kwargs)

    def __str__(self):
        color = self.color.name if self.color_id else 'No color'
        return f"{self.factory.name} / {self.product_model.name} / {color} / {self.condition}: {self.quantity}"

    class Meta:
        db_table = 'pool_stock'
        ordering = ['factory__name', 'product_model__name', 'condition']
        constraints = [
            models.UniqueConstraint(
                fields=['factory', 'product_model', 'color_key', 'condition'],
                name='uniq_pool_stock_key',
            ),
        ]
        indexes = [
            models.Index(fields=['factory', 'condition'], name='idx_pool_stock_factory_cond'),
        ]


class PoolStockTxn(StockTxn):
    stock = models.ForeignKey(PoolStock, on_delete=models.PROTECT, related_name='txns')

    def __str__(self):
        return f"{self.kind} {self.delta:+d} on {self.stock_id}"

    class Meta(StockTxn.Meta):
        db_table = 'pool_stock_txns'
        indexes = [
            models.Index(fields=['stock', 'created_at'], name='idx_pool_txn_stock_created'),
        ]
