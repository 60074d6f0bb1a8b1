import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ('PENDING_PAYMENT_APPROVAL', 'Pending Payment Approval'),
    ('IN_PRODUCTION', 'In Production'),
    ('PRE_SHIPPING', 'Pre-Shipping'),
    ('COMPLETED', 'Completed'),
    ('CANCELED', 'Canceled'),
]

DOC_TYPE_CHOICES = [
    ('PROOF_OF_PAYMENT', 'Proof of Payment'),
    ('QUOTE', 'Quote'),
    ('INVOICE', 'Invoice'),
    ('BUILD_SHEET', 'Build Sheet'),
    ('POST_PRODUCTION_MEDIA', 'Post-production Photos/Video'),
    ('SHIPPING_CHECKLIST', 'Shipping Checklist'),
    ('PRE_SHIPPING_MEDIA', 'Pre-shipping Photos/Video'),
    ('BILL_OF_LADING', 'Bill of Lading'),
    ('PROOF_OF_FINAL_PAYMENT', 'Proof of Final Payment'),
    ('PAID_INVOICE', 'Paid Invoice'),
    ('WARRANTY', 'Warranty'),
    ('MANUAL', 'Manual'),
    ('OTHER', 'Other'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='PENDING_PAYMENT_APPROVAL', max_length=32)),
                ('delivery_address', models.TextField()),
                ('payment_proof_url', models.CharField(blank=True, default='', max_length=500)),
                ('serial_number', models.CharField(blank=True, default='', max_length=100)),
                ('requested_ship_date', models.DateField(blank=True, null=True)),
                ('production_priority', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('shipping_method', models.CharField(blank=True, default='', max_length=50)),
                ('hardware_skimmer', models.BooleanField(default=False)),
                ('hardware_returns', models.BooleanField(default=False)),
                ('hardware_autocover', models.BooleanField(default=False)),
                ('hardware_main_drains', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('dealer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='parties.dealer')),
                ('product_model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='catalog.productmodel')),
                ('color', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='catalog.color')),
                ('factory', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='locations.factory')),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['dealer', 'status'], name='idx_order_dealer_status'),
                    models.Index(fields=['factory', 'status'], name='idx_order_factory_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ('comment', models.TextField(blank=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='history', to='orders.order')),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_history', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'order_history',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='OrderMedia',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_url', models.CharField(max_length=1000)),
                ('media_type', models.CharField(choices=[('photo', 'Photo'), ('proof', 'Proof'), ('note', 'Note'), ('update', 'Update')], default='update', max_length=20)),
                ('doc_type', models.CharField(blank=True, choices=DOC_TYPE_CHOICES, max_length=40, null=True)),
                ('visible_to_dealer', models.BooleanField(default=True)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='media', to='orders.order')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='uploaded_media', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'order_media',
                'ordering': ['-uploaded_at'],
                'indexes': [
                    models.Index(fields=['order', 'doc_type'], name='idx_media_order_doctype'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('dealer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='parties.dealer')),
                ('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='orders.order')),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
            },
        ),
    ]
