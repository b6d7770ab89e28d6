# custom_auth/models.py

import re

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models


class CustomUser(AbstractUser):
    """
    Subscriber account. Identity is verified upstream (JWT); the core only
    ever sees the resulting user id.
    """
    email = models.EmailField(unique=True, blank=False, null=False)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    # Email preference field
    unsubscribed_from_emails = models.BooleanField(default=False)

    def save(self, *args, **kwargs):
        self.username = self.username.lower()
        super().save(*args, **kwargs)


class Address(models.Model):
    """One entry in a subscriber's address book."""
    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='addresses')
    label = models.CharField(max_length=50, default='Home')
    street = models.CharField(max_length=255)
    landmark = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=255)
    input_postalcode = models.CharField(max_length=10, blank=True, null=True)  # Normalized format for lookups
    display_postalcode = models.CharField(max_length=15, blank=True, null=True)  # Original user input format
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        display_code = self.display_postalcode or self.input_postalcode or ''
        return f'{self.user} - {self.label}, {self.city} {display_code}'.strip()

    @staticmethod
    def normalize_postal_code(postal_code):
        """
        Removes all non-alphanumeric characters and converts to uppercase
        """
        if not postal_code:
            return None
        return re.sub(r'[^A-Z0-9]', '', postal_code.upper())

    def clean(self):
        if self.input_postalcode:
            if not self.display_postalcode:
                self.display_postalcode = self.input_postalcode
            self.input_postalcode = self.normalize_postal_code(self.input_postalcode)
            # Indian PIN codes are 6 digits
            if not (len(self.input_postalcode) == 6 and self.input_postalcode.isdigit()):
                raise ValidationError({'input_postalcode': 'PIN codes must be 6 digits'})

    def is_owned_by(self, user):
        return self.user_id == getattr(user, 'id', user)
