import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('meals', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CurryPackage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('diet_type', models.CharField(choices=[('veg', 'Vegetarian'), ('non_veg', 'Non-Vegetarian')], max_length=20)),
                ('token_count', models.PositiveIntegerField()),
                ('validity_days', models.PositiveIntegerField()),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['diet_type', 'token_count'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('token_count__gte', 1)), name='curry_package_token_count_gte_1'),
                    models.CheckConstraint(condition=models.Q(('validity_days__gte', 1)), name='curry_package_validity_gte_1'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CurryWallet',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('diet_type', models.CharField(choices=[('veg', 'Vegetarian'), ('non_veg', 'Non-Vegetarian')], max_length=20)),
                ('total_tokens', models.PositiveIntegerField(default=0)),
                ('used_tokens', models.PositiveIntegerField(default=0)),
                ('valid_until', models.DateField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('subscriber', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='curry_wallets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['diet_type'],
                'constraints': [
                    models.UniqueConstraint(fields=('subscriber', 'diet_type'), name='uniq_curry_wallet_per_diet'),
                    models.CheckConstraint(condition=models.Q(('used_tokens__gte', 0)), name='curry_wallet_used_gte_0'),
                    models.CheckConstraint(condition=models.Q(('used_tokens__lte', models.F('total_tokens'))), name='curry_wallet_used_lte_total'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TokenPurchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tokens_added', models.PositiveIntegerField()),
                ('price_paid', models.DecimalField(decimal_places=2, max_digits=10)),
                ('valid_until_before', models.DateField(blank=True, null=True)),
                ('valid_until_after', models.DateField()),
                ('purchased_at', models.DateTimeField(auto_now_add=True)),
                ('package', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to='curry.currypackage')),
                ('wallet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='purchases', to='curry.currywallet')),
            ],
            options={
                'ordering': ['-purchased_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='CurryOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_date', models.DateField()),
                ('item_type', models.CharField(choices=[('curry_lunch', 'Curry (Lunch)'), ('curry_dinner', 'Curry (Dinner)')], max_length=20)),
                ('delivery_slot', models.CharField(choices=[('morning', 'Morning (7-9 AM)'), ('afternoon', 'Afternoon (12-2 PM)'), ('evening', 'Evening (4-6 PM)'), ('night', 'Night (7-9 PM)')], max_length=20)),
                ('status', models.CharField(choices=[('ordered', 'Ordered'), ('cancelled', 'Cancelled'), ('fulfilled', 'Fulfilled')], default='ordered', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delivery_group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='curry_orders', to='meals.deliverygroup')),
                ('subscriber', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='curry_orders', to=settings.AUTH_USER_MODEL)),
                ('wallet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='curry.currywallet')),
            ],
            options={
                'ordering': ['-order_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['subscriber', 'order_date'], name='curry_order_sub_date_idx'),
                ],
            },
        ),
    ]
