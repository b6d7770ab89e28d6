from django.test import TestCase
from rest_framework.test import APIClient


class RoutingTests(TestCase):
    def test_healthz_is_public(self):
        response = self.client.get('/healthz/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content.strip(), b'ok')

    def test_core_endpoints_require_a_verified_caller(self):
        client = APIClient()
        for url in ('/subscriptions/active/', '/meals/schedule/', '/curry/wallets/', '/upgrades/prices/'):
            with self.subTest(url=url):
                self.assertEqual(client.get(url).status_code, 401)
