from drf_polymorphism.lookup import SchemaLookup
from drf_polymorphism.plumbing import get_schema_container
from drf_polymorphism.rewriter import PolymorphismRewriter
from drf_polymorphism.settings import polymorphism_settings


def get_candidate_types(generator=None, urlconf=None, patterns=None):
    """ distinct response types of the generator's (or the given) URL conf """
    collector = polymorphism_settings.DEFAULT_COLLECTOR_CLASS(
        urlconf=getattr(generator, 'urlconf', None) or urlconf,
        patterns=getattr(generator, 'patterns', None) or patterns,
    )
    return collector.get_response_types()


def rewrite_document(result, candidate_types, use_full_type_names=None, type_registry=None):
    """
    Rewrite a complete Swagger 2.0 / OpenAPI 3 document (or a bare type-keyed
    schema mapping) in place. ``$ref`` prefix and discriminator format follow the
    document flavor.
    """
    document, ref_prefix, discriminator_format = get_schema_container(result)
    rewriter = PolymorphismRewriter(
        type_registry=type_registry,
        lookup=SchemaLookup(use_full_type_names=use_full_type_names, ref_prefix=ref_prefix),
        discriminator_format=discriminator_format,
    )
    rewriter.rewrite(document, candidate_types)
    return result


def postprocess_schema_polymorphism(result, generator, request=None, public=None, **kwargs):
    """
    Postprocessing hook expressing registered type hierarchies with ``allOf`` and
    ``discriminator``. Compatible with drf-spectacular's ``POSTPROCESSING_HOOKS``.
    Candidate types are the response types of the endpoints the generator covers.
    """
    return rewrite_document(result, get_candidate_types(generator))
