import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('orders', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PoolStock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=0)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('color_key', models.CharField(default='NONE', editable=False, max_length=32)),
                ('condition', models.CharField(choices=[('READY', 'Ready'), ('RESERVED', 'Reserved'), ('IN_PRODUCTION', 'In Production'), ('DAMAGED', 'Damaged')], default='READY', max_length=20)),
                ('eta', models.DateField(blank=True, null=True)),
                ('factory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='pool_stock', to='locations.factory')),
                ('product_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='pool_stock', to='catalog.productmodel')),
                ('color', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='pool_stock', to='catalog.color')),
            ],
            options={
                'db_table': 'pool_stock',
                'ordering': ['factory__name', 'product_model__name', 'condition'],
                'indexes': [
                    models.Index(fields=['factory', 'condition'], name='idx_pool_stock_factory_cond'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('factory', 'product_model', 'color_key', 'condition'), name='uniq_pool_stock_key'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PoolStockTxn',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('kind', models.CharField(choices=[('ADD', 'Add'), ('IN', 'Stock In'), ('RESERVE', 'Reserve'), ('OUT', 'Stock Out'), ('SHIP', 'Ship'), ('RELEASE', 'Release'), ('ADJUST', 'Adjust')], max_length=10)),
                ('quantity', models.PositiveIntegerField()),
                ('delta', models.IntegerField()),
                ('notes', models.TextField(blank=True)),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pool_stock_txns', to='orders.order')),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pool_stock_txns', to=settings.AUTH_USER_MODEL)),
                ('stock', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='txns', to='pool_stock.poolstock')),
            ],
            options={
                'db_table': 'pool_stock_txns',
                'ordering': ['-created_at', '-id'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['stock', 'created_at'], name='idx_pool_txn_stock_created'),
                ],
            },
        ),
    ]
