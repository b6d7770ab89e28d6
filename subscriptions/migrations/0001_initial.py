import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('custom_auth', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='MealPackage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('description', models.TextField(blank=True)),
                ('diet_type', models.CharField(choices=[('veg', 'Vegetarian'), ('non_veg', 'Non-Vegetarian')], max_length=20)),
                ('cuisine_type', models.CharField(choices=[('south_indian', 'South Indian'), ('north_indian', 'North Indian')], max_length=20)),
                ('includes_breakfast', models.BooleanField(default=False)),
                ('includes_lunch', models.BooleanField(default=True)),
                ('includes_snacks', models.BooleanField(default=False)),
                ('includes_dinner', models.BooleanField(default=True)),
                ('duration_days', models.PositiveIntegerField(help_text='Number of service days, start date inclusive')),
                ('default_container', models.CharField(choices=[('plastic', 'Disposable Plastic'), ('steel', 'Steel Tiffin'), ('eco', 'Eco-friendly Box')], default='plastic', max_length=20)),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('allows_diet_upgrade', models.BooleanField(default=False)),
                ('allows_cuisine_upgrade', models.BooleanField(default=False)),
                ('allows_container_choice', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('duration_days__gte', 1)), name='meal_package_duration_gte_1'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Subscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('container_type', models.CharField(choices=[('plastic', 'Disposable Plastic'), ('steel', 'Steel Tiffin'), ('eco', 'Eco-friendly Box')], max_length=20)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('ended_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('address', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subscriptions', to='custom_auth.address')),
                ('meal_package', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subscriptions', to='subscriptions.mealpackage')),
                ('subscriber', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meal_subscriptions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['subscriber', 'status'], name='sub_subscriber_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'active')), fields=('subscriber',), name='uniq_active_subscription_per_subscriber'),
                    models.CheckConstraint(condition=models.Q(('end_date__gte', models.F('start_date'))), name='subscription_end_gte_start'),
                ],
            },
        ),
    ]
