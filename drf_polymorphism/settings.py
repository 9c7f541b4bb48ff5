from contextlib import contextmanager
from typing import Any, Dict

from django.conf import settings
from rest_framework.settings import APISettings, perform_import

POLYMORPHISM_DEFAULTS: Dict[str, Any] = {
    # Naming strategy for schema document keys and $ref targets. False uses the short
    # component name (class name, "Serializer" suffix stripped, Meta.ref_name honored),
    # True uses the fully qualified "module.QualName" of the type.
    'USE_FULL_TYPE_NAMES': False,

    # Prefix used to build $ref strings when the document is a bare type-keyed mapping.
    # Full documents choose their prefix themselves: Swagger 2.0 documents use
    # '#/definitions/' and OpenAPI 3 documents use '#/components/schemas/'.
    'REF_PREFIX': '#/definitions/',

    # How the discriminator is written onto base schemas of bare documents. 'string'
    # produces {"discriminator": "type"} (Swagger 2.0), 'object' produces
    # {"discriminator": {"propertyName": "type"}} (OpenAPI 3).
    'DISCRIMINATOR_FORMAT': 'string',

    # Import path of the object answering "which subtypes and which discriminator does
    # this base type have". Must implement drf_polymorphism.registry.TypeRegistryAdapter.
    'TYPE_REGISTRY': 'drf_polymorphism.registry.type_registry',

    # Class used to generate schemas for subtypes that are only reachable through
    # polymorphism and are therefore missing from the generated document.
    # interface: registrar = cls(lookup); registrar.ensure_registered(document, type)
    'DEFAULT_REGISTRAR_CLASS': 'drf_polymorphism.registrar.DefaultSchemaRegistrar',

    # Class used to derive the candidate (response) types from the URL conf.
    'DEFAULT_COLLECTOR_CLASS': 'drf_polymorphism.generators.ResponseTypeCollector',

    # Option for turning off error and warn messages
    'DISABLE_ERRORS_AND_WARNINGS': False,

    # Inspects the type registry and emits warnings as part of "./manage.py check --deploy"
    'ENABLE_DJANGO_DEPLOY_CHECK': True,
}

IMPORT_STRINGS = [
    'TYPE_REGISTRY',
    'DEFAULT_REGISTRAR_CLASS',
    'DEFAULT_COLLECTOR_CLASS',
]


class PolymorphismSettings(APISettings):
    _original_settings: Dict[str, Any] = {}

    def apply_patches(self, patches):
        for attr, val in patches.items():
            if attr in self.import_strings:
                val = perform_import(val, attr)
            # load and store original value, then override __dict__ entry
            self._original_settings[attr] = getattr(self, attr)
            setattr(self, attr, val)

    def clear_patches(self):
        for attr, orig_val in self._original_settings.items():
            setattr(self, attr, orig_val)
        self._original_settings = {}


polymorphism_settings = PolymorphismSettings(
    user_settings=getattr(settings, 'POLYMORPHISM_SETTINGS', {}),  # type: ignore
    defaults=POLYMORPHISM_DEFAULTS,  # type: ignore
    import_strings=IMPORT_STRINGS,
)


@contextmanager
def patched_settings(patches):
    """ temporarily patch the global polymorphism settings (or do nothing) """
    if not patches:
        yield
    else:
        try:
            polymorphism_settings.apply_patches(patches)
            yield
        finally:
            polymorphism_settings.clear_patches()
