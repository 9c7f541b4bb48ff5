from typing import Optional

from drf_polymorphism.plumbing import (
    SWAGGER_REF_PREFIX, SchemaNotFoundError, get_qualified_name, get_type_name,
)
from drf_polymorphism.settings import polymorphism_settings


class SchemaLookup:
    """
    Resolves types to their entry in a schema document. The naming strategy is fixed
    at construction and applies to every key and ``$ref`` produced by this instance.
    """

    def __init__(self, use_full_type_names: Optional[bool] = None, ref_prefix: Optional[str] = None):
        if use_full_type_names is None:
            use_full_type_names = polymorphism_settings.USE_FULL_TYPE_NAMES
        if ref_prefix is None:
            ref_prefix = polymorphism_settings.REF_PREFIX
        self.use_full_type_names = bool(use_full_type_names)
        self.ref_prefix = ref_prefix

    @property
    def is_swagger2(self) -> bool:
        """ Swagger 2.0 definitions know neither ``nullable`` nor ``oneOf`` """
        return self.ref_prefix == SWAGGER_REF_PREFIX

    def get_key(self, type_descriptor) -> str:
        return get_type_name(type_descriptor, self.use_full_type_names)

    def get_ref(self, type_descriptor) -> dict:
        return {'$ref': self.ref_prefix + self.get_key(type_descriptor)}

    def try_resolve(self, document: dict, type_descriptor) -> Optional[dict]:
        return document.get(self.get_key(type_descriptor))

    def try_resolve_ref(self, document: dict, ref: str) -> Optional[dict]:
        if not ref.startswith(self.ref_prefix):
            return None
        return document.get(ref[len(self.ref_prefix):])

    def resolve_or_fail(self, document: dict, type_descriptor) -> dict:
        schema = self.try_resolve(document, type_descriptor)
        if schema is None:
            raise SchemaNotFoundError(get_qualified_name(type_descriptor))
        return schema
