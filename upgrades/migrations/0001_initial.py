import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('subscriptions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='UpgradePriceRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('upgrade_type', models.CharField(choices=[('veg_to_nonveg', 'Veg to Non-Veg'), ('south_to_north', 'South Indian to North Indian')], max_length=20)),
                ('scope', models.CharField(choices=[('meal', 'Single meal type'), ('day', 'Full day'), ('week', 'Full calendar week')], max_length=10)),
                ('meal_type', models.CharField(blank=True, choices=[('breakfast', 'Breakfast'), ('lunch', 'Lunch'), ('snacks', 'Snacks'), ('dinner', 'Dinner')], max_length=20, null=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=8)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['upgrade_type', 'scope', 'meal_type'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('meal_type__isnull', False)), fields=('upgrade_type', 'scope', 'meal_type'), name='uniq_price_rule_with_meal_type'),
                    models.UniqueConstraint(condition=models.Q(('meal_type__isnull', True)), fields=('upgrade_type', 'scope'), name='uniq_price_rule_without_meal_type'),
                    models.CheckConstraint(condition=models.Q(models.Q(('meal_type__isnull', False), ('scope', 'meal')), models.Q(models.Q(('scope', 'meal'), _negated=True), ('meal_type__isnull', True)), _connector='OR'), name='price_rule_meal_type_iff_meal_scope'),
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='price_rule_price_gte_0'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SubscriptionUpgrade',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('upgrade_type', models.CharField(choices=[('veg_to_nonveg', 'Veg to Non-Veg'), ('south_to_north', 'South Indian to North Indian')], max_length=20)),
                ('scope', models.CharField(choices=[('meal', 'Single meal type'), ('day', 'Full day'), ('week', 'Full calendar week')], max_length=10)),
                ('meal_type', models.CharField(blank=True, choices=[('breakfast', 'Breakfast'), ('lunch', 'Lunch'), ('snacks', 'Snacks'), ('dinner', 'Dinner')], max_length=20, null=True)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('effective_start_date', models.DateField()),
                ('effective_end_date', models.DateField()),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=8)),
                ('units', models.PositiveIntegerField()),
                ('total_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('subscription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='upgrades', to='subscriptions.subscription')),
            ],
            options={
                'ordering': ['start_date', 'id'],
                'indexes': [
                    models.Index(fields=['subscription', 'effective_start_date', 'effective_end_date'], name='upgrade_sub_effective_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('end_date__gte', models.F('start_date'))), name='upgrade_end_gte_start'),
                ],
            },
        ),
    ]
