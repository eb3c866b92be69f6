from django.apps import AppConfig


class VanityGateConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'vanitygate'
    verbose_name = 'Vanity Gate'

    context = None

    def ready(self):
        from django.conf import settings

        from vanitygate.context import build_context

        self.context = build_context(settings)
