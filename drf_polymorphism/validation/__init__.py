import json
import os

import jsonschema
from rest_framework.renderers import JSONRenderer

from drf_polymorphism.plumbing import get_schema_container


def validate_schema(api_schema):
    """
    Validate the type-keyed schema mapping of a Swagger 2.0 or OpenAPI 3 document (or
    a bare mapping) against the schema object subset used for polymorphism:
    ``type``, ``properties``, ``required``, ``allOf``, ``$ref``, ``discriminator`` and
    the usual value constraints. Reference objects must not carry siblings.

    This is a structural sanity check and not a full OpenAPI validation.
    """
    schema_spec_path = os.path.join(os.path.dirname(__file__), 'schema_object.json')

    with open(schema_spec_path) as fh:
        schema_object_spec = json.load(fh)

    # coerce any remnants of objects (lazy strings, decimals) to basic types
    api_schema = json.loads(JSONRenderer().render(api_schema))
    document, _, _ = get_schema_container(api_schema)

    jsonschema.validate(instance=document, schema=schema_object_spec)
