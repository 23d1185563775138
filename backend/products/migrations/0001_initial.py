import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Name of the product category.', max_length=100, unique=True)),
                ('description', models.TextField(blank=True, help_text='Description of the category.')),
                ('order', models.IntegerField(default=0, help_text='Display order for this category. Lower numbers appear first.')),
                ('is_active', models.BooleanField(db_index=True, default=True)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Name of the product.', max_length=200)),
                ('description', models.TextField(blank=True, help_text='Detailed description of the product.')),
                ('price', models.DecimalField(decimal_places=2, help_text='The current menu price. Orders capture it at the time of sale.', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('preparation_time', models.PositiveIntegerField(default=0, help_text='Typical preparation time in minutes.')),
                ('calories', models.PositiveIntegerField(blank=True, null=True)),
                ('is_available', models.BooleanField(db_index=True, default=True, help_text='Unavailable products cannot be added to new orders.')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, help_text='Product category. Leave blank for uncategorized products.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='products.category')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['category', 'is_available'], name='product_cat_available_idx'),
                    models.Index(fields=['name'], name='product_name_idx'),
                ],
            },
        ),
    ]
