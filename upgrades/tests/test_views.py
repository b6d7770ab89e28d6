from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from shared.testing import frozen_service_time, make_subscriber, make_subscription
from upgrades.models import UpgradePriceRule

TODAY = date(2025, 3, 5)


class UpgradeViewTests(TestCase):
    def setUp(self):
        self.user = make_subscriber('asha')
        self.subscription = make_subscription(self.user)
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        UpgradePriceRule.objects.create(upgrade_type='veg_to_nonveg', scope='day', price=Decimal('100'))

    def test_prices(self):
        response = self.client.get(reverse('upgrades:prices'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]['scope'], 'day')
        self.assertEqual(response.data[0]['price'], '100.00')

    def test_apply_list_and_remove(self):
        payload = {
            'subscription_id': self.subscription.id,
            'upgrade_type': 'veg_to_nonveg',
            'scope': 'day',
            'start_date': '2025-03-10',
            'end_date': '2025-03-12',
        }
        with frozen_service_time(TODAY):
            response = self.client.post(reverse('upgrades:upgrades'), payload, format='json')
            self.assertEqual(response.status_code, 201)
            self.assertEqual(response.data['total_price'], '300.00')
            upgrade_id = response.data['id']

            response = self.client.get(reverse('upgrades:upgrades'))
            self.assertEqual([u['id'] for u in response.data], [upgrade_id])

            response = self.client.delete(reverse('upgrades:remove', args=[upgrade_id]))
        self.assertEqual(response.status_code, 204)

    def test_missing_price_rule_maps_to_not_found(self):
        payload = {
            'subscription_id': self.subscription.id,
            'upgrade_type': 'south_to_north',
            'scope': 'day',
            'start_date': '2025-03-10',
            'end_date': '2025-03-10',
        }
        with frozen_service_time(TODAY):
            response = self.client.post(reverse('upgrades:upgrades'), payload, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'PRICE_RULE_NOT_FOUND')

    def test_reversed_dates_are_rejected_by_the_serializer(self):
        payload = {
            'subscription_id': self.subscription.id,
            'upgrade_type': 'veg_to_nonveg',
            'scope': 'day',
            'start_date': '2025-03-12',
            'end_date': '2025-03-10',
        }
        response = self.client.post(reverse('upgrades:upgrades'), payload, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('end_date', response.data)
