from django.db import models


class Factory(models.Model):
    """Production site building finished goods"""
    name = models.CharField(max_length=200, unique=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'factories'
        ordering = ['name']


class InventoryLocation(models.Model):
    """Where raw material is stored"""
    TYPE_FACTORY = 'FACTORY'
    TYPE_WAREHOUSE = 'WAREHOUSE'
    TYPE_CHOICES = [
        (TYPE_FACTORY, 'Factory'),
        (TYPE_WAREHOUSE, 'Warehouse'),
        ('TRUCK', 'Truck'),
        ('OTHER', 'Other'),
    ]

    name = models.CharField(max_length=200)
    location_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_WAREHOUSE)
    # only FACTORY locations are tied to a production site
    factory = models.ForeignKey(Factory, on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_locations')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if self.location_type != self.TYPE_FACTORY:
            self.factory = None
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'inventory_locations'
        ordering = ['-is_active', 'name']
