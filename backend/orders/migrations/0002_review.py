import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


RATING_VALIDATORS = [
    django.core.validators.MinValueValidator(1),
    django.core.validators.MaxValueValidator(5),
]


class Migration(migrations.Migration):

    dependencies = [
        ('orders', '0001_initial'),
        ('products', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reviewer_name', models.CharField(blank=True, max_length=50)),
                ('rating', models.PositiveSmallIntegerField(validators=RATING_VALIDATORS)),
                ('delivery_rating', models.PositiveSmallIntegerField(blank=True, null=True, validators=RATING_VALIDATORS)),
                ('food_rating', models.PositiveSmallIntegerField(blank=True, null=True, validators=RATING_VALIDATORS)),
                ('comment', models.CharField(blank=True, max_length=1000)),
                ('review_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to=settings.AUTH_USER_MODEL)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='review', to='orders.order')),
                ('product', models.ForeignKey(blank=True, help_text='Optional dish from the order the review is about.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviews', to='products.product')),
            ],
            options={
                'verbose_name': 'Review',
                'verbose_name_plural': 'Reviews',
                'ordering': ['-review_date', '-id'],
                'indexes': [
                    models.Index(fields=['product', 'review_date'], name='review_product_date_idx'),
                    models.Index(fields=['customer', 'review_date'], name='review_customer_date_idx'),
                ],
            },
        ),
    ]
