from typing import Iterable, Optional

from drf_polymorphism.drainage import add_trace_message
from drf_polymorphism.lookup import SchemaLookup
from drf_polymorphism.plumbing import (
    InconsistentRegistryError, SchemaNotFoundError, build_basic_type, get_qualified_name,
    lower_first,
)
from drf_polymorphism.registrar import SchemaRegistrar
from drf_polymorphism.registry import TypeRegistryAdapter
from drf_polymorphism.settings import polymorphism_settings


class PolymorphismRewriter:
    """
    Expresses declared type hierarchies in an already generated, flat schema document.

    For every candidate type that is present in the document and has both subtypes
    and a discriminator in the type registry:

    - every subtype schema is turned into ``allOf: [<$ref to base>, <own properties>]``,
      where own properties are those not already declared on the base schema or
      inherited by it. Subtypes missing from the document are generated through the
      registrar first.
    - the base schema receives the discriminator, which becomes its only required
      property and is added as string property if not yet declared.

    The document is modified in place. Nested hierarchies are rewritten bottom-up: a
    candidate that is also a subtype of another candidate is completed before it is
    composed onto its own base, so the order of candidate types is irrelevant.
    Declaring a type as its own subtype is not supported.
    """

    def __init__(
        self,
        type_registry: Optional[TypeRegistryAdapter] = None,
        registrar: Optional[SchemaRegistrar] = None,
        lookup: Optional[SchemaLookup] = None,
        discriminator_format: Optional[str] = None,
    ):
        self.lookup = lookup if lookup is not None else SchemaLookup()
        if type_registry is None:
            type_registry = polymorphism_settings.TYPE_REGISTRY
        if registrar is None:
            registrar = polymorphism_settings.DEFAULT_REGISTRAR_CLASS(self.lookup)
        self.type_registry = type_registry
        self.registrar = registrar
        self.discriminator_format = discriminator_format or polymorphism_settings.DISCRIMINATOR_FORMAT
        assert self.discriminator_format in ('string', 'object'), (
            f'unknown discriminator format "{self.discriminator_format}"'
        )

    def rewrite(self, document: dict, candidate_types: Iterable) -> None:
        candidates = dict.fromkeys(candidate_types)
        visited: set = set()
        for base_type in candidates:
            self._rewrite_hierarchy(document, base_type, candidates, visited)

    def _rewrite_hierarchy(self, document, base_type, candidates, visited):
        if base_type in visited:
            return
        visited.add(base_type)

        for subtype in self.type_registry.get_subtypes(base_type):
            if subtype in candidates:
                self._rewrite_hierarchy(document, subtype, candidates, visited)

        with add_trace_message(base_type):
            self._rewrite_base_type(document, base_type)

    def _rewrite_base_type(self, document, base_type):
        base_schema = self.lookup.try_resolve(document, base_type)
        # candidates are collected across all routes and may lie outside of this document
        if base_schema is None:
            return

        subtypes = self.type_registry.get_subtypes(base_type)
        discriminator = self.type_registry.get_discriminator_name(base_type)
        if not subtypes or not discriminator:
            return

        base_properties = self.get_effective_properties(document, base_schema)
        for subtype in subtypes:
            with add_trace_message(subtype):
                subtype_schema = self._get_or_register(document, subtype)
                self.add_inheritance(base_type, base_properties, subtype_schema)

        self.add_discriminator(base_schema, discriminator)

    def _get_or_register(self, document, subtype) -> dict:
        subtype_schema = self.lookup.try_resolve(document, subtype)
        if subtype_schema is not None:
            return subtype_schema

        self.registrar.ensure_registered(document, subtype)
        try:
            return self.lookup.resolve_or_fail(document, subtype)
        except SchemaNotFoundError as exc:
            raise InconsistentRegistryError(
                f'Subtype "{get_qualified_name(subtype)}" is declared in the type registry, '
                f'but {self.registrar.__class__.__name__} did not register a schema for it.'
            ) from exc

    def get_effective_properties(self, document: dict, schema: dict, seen=None) -> dict:
        """
        Properties declared on the schema plus those it inherits through ``allOf``,
        which matters for bases that were already composed onto a base of their own.
        """
        seen = set() if seen is None else seen
        properties = {}
        for part in schema.get('allOf') or []:
            if '$ref' not in part:
                properties.update(part.get('properties') or {})
            elif part['$ref'] not in seen:
                seen.add(part['$ref'])
                referenced = self.lookup.try_resolve_ref(document, part['$ref'])
                if referenced is not None:
                    properties.update(self.get_effective_properties(document, referenced, seen))
        properties.update(schema.get('properties') or {})
        return properties

    def add_inheritance(self, base_type, base_properties: dict, subtype_schema: dict) -> None:
        base_ref = self.lookup.get_ref(base_type)
        all_of = subtype_schema.get('allOf')
        # subtype was already composed onto this base by a previous pass
        if all_of and all_of[0] == base_ref:
            return

        own_schema = {}
        if subtype_schema.get('type') is not None:
            own_schema['type'] = subtype_schema['type']
        if subtype_schema.get('required'):
            own_schema['required'] = list(subtype_schema['required'])
        own_schema['properties'] = {
            name: schema for name, schema in (subtype_schema.get('properties') or {}).items()
            if name not in base_properties
        }

        subtype_schema['allOf'] = [base_ref, own_schema]
        # properties live exclusively in allOf from here on
        subtype_schema['properties'] = {}

    def add_discriminator(self, base_schema: dict, discriminator: str) -> None:
        # properties are camelCased, so align the first character to avoid case duplicates
        discriminator = lower_first(discriminator)

        if self.discriminator_format == 'object':
            base_schema['discriminator'] = {'propertyName': discriminator}
        else:
            base_schema['discriminator'] = discriminator
        # TODO: merge with previously required base properties instead of replacing them,
        #  once consumers no longer rely on the discriminator being the only required field.
        base_schema['required'] = [discriminator]

        properties = base_schema.get('properties') or {}
        if discriminator not in properties:
            properties[discriminator] = build_basic_type(str)
        base_schema['properties'] = properties
