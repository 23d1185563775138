import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


MONEY_VALIDATORS = [django.core.validators.MinValueValidator(Decimal('0.00'))]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('customers', '0001_initial'),
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_number', models.CharField(editable=False, max_length=20, unique=True)),
                ('status', models.CharField(choices=[('New', 'New'), ('Confirmed', 'Confirmed'), ('Preparing', 'Preparing'), ('Ready', 'Ready'), ('OutForDelivery', 'Out for Delivery'), ('Delivered', 'Delivered'), ('Canceled', 'Canceled')], default='New', max_length=20)),
                ('source', models.CharField(choices=[('Website', 'Website'), ('Phone', 'Phone'), ('ThirdParty', 'Third Party')], default='Website', max_length=20)),
                ('order_date', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('required_time', models.DateTimeField(blank=True, null=True)),
                ('confirmation_time', models.DateTimeField(blank=True, null=True)),
                ('preparation_start_time', models.DateTimeField(blank=True, null=True)),
                ('ready_time', models.DateTimeField(blank=True, help_text='When the kitchen marked the order as ready.', null=True)),
                ('delivery_start_time', models.DateTimeField(blank=True, help_text='When the order was handed to a delivery person.', null=True)),
                ('delivery_end_time', models.DateTimeField(blank=True, null=True)),
                ('cancellation_time', models.DateTimeField(blank=True, null=True)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=MONEY_VALIDATORS)),
                ('delivery_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=MONEY_VALIDATORS)),
                ('tax', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=MONEY_VALIDATORS)),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=MONEY_VALIDATORS)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=MONEY_VALIDATORS)),
                ('estimated_delivery_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('payment_method', models.CharField(blank=True, choices=[('Stripe', 'Stripe'), ('Cash', 'Cash')], max_length=20, null=True)),
                ('payment_status', models.CharField(choices=[('Pending', 'Pending'), ('Completed', 'Completed'), ('Failed', 'Failed')], default='Pending', max_length=20)),
                ('transaction_id', models.CharField(blank=True, max_length=100, null=True)),
                ('notes', models.TextField(blank=True, default='', validators=[django.core.validators.MaxLengthValidator(1000)])),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('confirmed_by', models.ForeignKey(blank=True, help_text='Staff member who confirmed the order.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='confirmed_orders', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to=settings.AUTH_USER_MODEL)),
                ('delivery_address', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='customers.address')),
                ('delivery_person', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['-order_date', 'order_number'],
                'indexes': [
                    models.Index(fields=['status', 'required_time'], name='order_status_required_idx'),
                    models.Index(fields=['customer', 'status'], name='order_cust_status_idx'),
                    models.Index(fields=['delivery_person', 'status'], name='order_driver_status_idx'),
                    models.Index(fields=['payment_status', 'status'], name='order_pay_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('unit_price', models.DecimalField(decimal_places=2, help_text='Price of the product at the time the line was added.', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='quantity x unit_price, maintained by the item service.', max_digits=10)),
                ('special_instructions', models.CharField(blank=True, help_text="Customer notes, e.g., 'no onions'", max_length=500)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_items', to='products.product')),
            ],
            options={
                'verbose_name': 'Order Item',
                'verbose_name_plural': 'Order Items',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['order', 'product'], name='item_order_product_idx')],
            },
        ),
        migrations.CreateModel(
            name='Delivery',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('OnTheWay', 'On the Way'), ('Delivered', 'Delivered'), ('Canceled', 'Canceled')], default='OnTheWay', max_length=20)),
                ('status_change_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('delivery_start_time', models.DateTimeField(blank=True, null=True)),
                ('delivery_end_time', models.DateTimeField(blank=True, null=True)),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('notes', models.CharField(blank=True, max_length=500)),
                ('delivery_person', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='deliveries', to=settings.AUTH_USER_MODEL)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='delivery', to='orders.order')),
            ],
            options={
                'verbose_name': 'Delivery',
                'verbose_name_plural': 'Deliveries',
            },
        ),
    ]
