from django.apps import AppConfig


class PolymorphismConfig(AppConfig):
    name = 'drf_polymorphism'
    verbose_name = "drf-polymorphism"

    def ready(self):
        import drf_polymorphism.checks  # noqa: F401
