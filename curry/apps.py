from django.apps import AppConfig


class CurryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'curry'
    verbose_name = 'Curry Tokens'
