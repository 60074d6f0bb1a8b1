from django.db import models


class ProductModel(models.Model):
    """A buildable pool model"""
    name = models.CharField(max_length=200, unique=True)
    length_ft = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    width_ft = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    depth_ft = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'product_models'
        ordering = ['name']


class Color(models.Model):
    name = models.CharField(max_length=100, unique=True)
    swatch_url = models.URLField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'colors'
        ordering = ['name']
