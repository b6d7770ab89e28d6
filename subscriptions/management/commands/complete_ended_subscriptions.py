from django.core.management.base import BaseCommand

from subscriptions.services.lifecycle import complete_ended_subscriptions


class Command(BaseCommand):
    help = 'Mark active subscriptions whose end date has passed as completed.'

    def handle(self, *args, **options):
        count = complete_ended_subscriptions()
        self.stdout.write(self.style.SUCCESS(f"Completed {count} subscription(s)"))
