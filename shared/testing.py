"""
Fixtures shared by the app test suites.

``frozen_service_time`` freezes the clock (freezegun) at a wall-clock time in
the service timezone, which is what every window and cutoff rule reads.
"""
from datetime import date, datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from freezegun import freeze_time

from custom_auth.models import Address
from shared.serving_clock import service_timezone
from subscriptions.models import MealPackage, Subscription


def service_datetime(day, hour=12, minute=0, second=0):
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=service_timezone())


def frozen_service_time(day, hour=12, minute=0, second=0):
    return freeze_time(service_datetime(day, hour, minute, second))


def make_subscriber(username='subscriber', **extra):
    extra.setdefault('email', f'{username}@example.com')
    return get_user_model().objects.create_user(username=username, password='testpass123', **extra)


def make_address(user, **extra):
    fields = {'street': '12 MG Road', 'city': 'Bengaluru', 'input_postalcode': '560001'}
    fields.update(extra)
    return Address.objects.create(user=user, **fields)


def make_package(**extra):
    fields = {
        'name': 'Veg Lunch & Dinner',
        'diet_type': 'veg',
        'cuisine_type': 'south_indian',
        'includes_lunch': True,
        'includes_dinner': True,
        'duration_days': 30,
        'price': Decimal('3000.00'),
        'allows_diet_upgrade': True,
        'allows_cuisine_upgrade': True,
    }
    fields.update(extra)
    return MealPackage.objects.create(**fields)


def make_subscription(subscriber, package=None, start_date=None, **extra):
    package = package or make_package()
    start_date = start_date or date(2025, 3, 3)
    fields = {
        'subscriber': subscriber,
        'meal_package': package,
        'address': make_address(subscriber),
        'container_type': package.default_container,
        'start_date': start_date,
        'end_date': package.end_date_for(start_date),
        'status': Subscription.Status.ACTIVE,
    }
    fields.update(extra)
    return Subscription.objects.create(**fields)
