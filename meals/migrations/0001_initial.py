import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('subscriptions', '0001_initial'),
        ('upgrades', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DeliveryGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('service_date', models.DateField()),
                ('delivery_slot', models.CharField(choices=[('morning', 'Morning (7-9 AM)'), ('afternoon', 'Afternoon (12-2 PM)'), ('evening', 'Evening (4-6 PM)'), ('night', 'Night (7-9 PM)')], max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('subscriber', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='delivery_groups', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['service_date', models.Case(models.When(delivery_slot='morning', then=models.Value(0)), models.When(delivery_slot='afternoon', then=models.Value(1)), models.When(delivery_slot='evening', then=models.Value(2)), models.When(delivery_slot='night', then=models.Value(3)), output_field=models.IntegerField()), 'id'],
                'indexes': [
                    models.Index(fields=['subscriber', 'service_date'], name='delivery_group_sub_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScheduledMeal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('service_date', models.DateField()),
                ('item_type', models.CharField(choices=[('breakfast', 'Breakfast'), ('lunch', 'Lunch'), ('snacks', 'Snacks'), ('dinner', 'Dinner')], max_length=20)),
                ('delivery_slot', models.CharField(choices=[('morning', 'Morning (7-9 AM)'), ('afternoon', 'Afternoon (12-2 PM)'), ('evening', 'Evening (4-6 PM)'), ('night', 'Night (7-9 PM)')], max_length=20)),
                ('is_paused', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delivery_group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='meals', to='meals.deliverygroup')),
                ('subscription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scheduled_meals', to='subscriptions.subscription')),
                ('upgrade', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='scheduled_meals', to='upgrades.subscriptionupgrade')),
            ],
            options={
                'ordering': ['service_date', models.Case(models.When(delivery_slot='morning', then=models.Value(0)), models.When(delivery_slot='afternoon', then=models.Value(1)), models.When(delivery_slot='evening', then=models.Value(2)), models.When(delivery_slot='night', then=models.Value(3)), output_field=models.IntegerField()), 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('subscription', 'service_date', 'item_type'), name='uniq_scheduled_meal_per_item_per_day'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PauseAuditEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('previous_state', models.CharField(choices=[('active', 'Active'), ('paused', 'Paused')], max_length=10)),
                ('new_state', models.CharField(choices=[('active', 'Active'), ('paused', 'Paused')], max_length=10)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pause_actions', to=settings.AUTH_USER_MODEL)),
                ('scheduled_meal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pause_audit', to='meals.scheduledmeal')),
            ],
            options={
                'verbose_name_plural': 'Pause audit entries',
                'ordering': ['timestamp', 'id'],
            },
        ),
    ]
