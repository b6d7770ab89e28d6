from datetime import date

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from shared.testing import frozen_service_time, make_address, make_package, make_subscriber, make_subscription
from subscriptions.models import Subscription

TODAY = date(2025, 3, 5)


class SubscriptionViewTests(TestCase):
    def setUp(self):
        self.user = make_subscriber('asha')
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.address = make_address(self.user)
        self.package = make_package()

    def test_requires_authentication(self):
        response = APIClient().get(reverse('subscriptions:active'))
        self.assertEqual(response.status_code, 401)

    def test_packages_lists_active_packages(self):
        make_package(name='Retired', is_active=False)
        response = self.client.get(reverse('subscriptions:packages'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p['name'] for p in response.data], [self.package.name])
        self.assertEqual(response.data[0]['item_types'], ['lunch', 'dinner'])

    def test_create_and_fetch_active(self):
        with frozen_service_time(TODAY):
            response = self.client.post(
                reverse('subscriptions:create'),
                {'package_id': self.package.id, 'address_id': self.address.id},
                format='json',
            )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['start_date'], '2025-03-05')

        response = self.client.get(reverse('subscriptions:active'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['meal_package']['id'], self.package.id)

    def test_duplicate_maps_to_conflict(self):
        make_subscription(self.user, package=self.package, start_date=TODAY)
        with frozen_service_time(TODAY):
            response = self.client.post(
                reverse('subscriptions:create'),
                {'package_id': self.package.id, 'address_id': self.address.id},
                format='json',
            )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['error'], 'DUPLICATE_ACTIVE_SUBSCRIPTION')
        self.assertIn('message', response.data)

    def test_unknown_package_maps_to_not_found(self):
        with frozen_service_time(TODAY):
            response = self.client.post(
                reverse('subscriptions:create'),
                {'package_id': 424242, 'address_id': self.address.id},
                format='json',
            )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'PACKAGE_NOT_FOUND')
        self.assertEqual(response.data['reference'], 'meal_package:424242')

    def test_malformed_body_uses_drf_validation(self):
        response = self.client.post(reverse('subscriptions:create'), {'package_id': 'abc'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('address_id', response.data)

    def test_no_active_subscription(self):
        response = self.client.get(reverse('subscriptions:active'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'NO_ACTIVE_SUBSCRIPTION')

    def test_end_defaults_to_cancelled(self):
        subscription = make_subscription(self.user, package=self.package, start_date=TODAY)
        response = self.client.post(reverse('subscriptions:end', args=[subscription.id]), {}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], Subscription.Status.CANCELLED)

    def test_end_someone_elses_subscription(self):
        other = make_subscriber('ravi')
        subscription = make_subscription(other, package=self.package, start_date=TODAY)
        response = self.client.post(reverse('subscriptions:end', args=[subscription.id]), {}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['error'], 'OWNERSHIP_VIOLATION')
