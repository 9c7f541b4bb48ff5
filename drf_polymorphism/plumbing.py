import collections.abc
import functools
import inspect
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Optional, Tuple
from uuid import UUID

from rest_framework import fields, serializers

from drf_polymorphism.drainage import warn
from drf_polymorphism.settings import polymorphism_settings

SWAGGER_REF_PREFIX = '#/definitions/'
OPENAPI_REF_PREFIX = '#/components/schemas/'

# make a copy with dict() before modifying returned dict
PYTHON_TYPE_MAPPING = {
    str: {'type': 'string'},
    bool: {'type': 'boolean'},
    int: {'type': 'integer'},
    float: {'type': 'number', 'format': 'double'},
    Decimal: {'type': 'number', 'format': 'double'},
    bytes: {'type': 'string', 'format': 'binary'},
    datetime: {'type': 'string', 'format': 'date-time'},
    date: {'type': 'string', 'format': 'date'},
    time: {'type': 'string', 'format': 'time'},
    timedelta: {'type': 'string', 'format': 'duration'},
    UUID: {'type': 'string', 'format': 'uuid'},
    IPv4Address: {'type': 'string', 'format': 'ipv4'},
    IPv6Address: {'type': 'string', 'format': 'ipv6'},
    dict: {'type': 'object', 'additionalProperties': {}},
    typing.Any: {},
}


class UnableToProceedError(Exception):
    pass


class SchemaNotFoundError(UnableToProceedError, LookupError):
    """ A schema that was required to exist is absent from the document. """

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f'Schema for type "{type_name}" does not exist in the schema document.')


class InconsistentRegistryError(UnableToProceedError):
    """
    A subtype declared by the type registry could not be resolved to a schema, even
    after the registrar was explicitly asked to generate one.
    """
    pass


def get_class(obj) -> type:
    return obj if inspect.isclass(obj) else obj.__class__


def force_instance(serializer_or_field):
    if not inspect.isclass(serializer_or_field):
        return serializer_or_field
    elif issubclass(serializer_or_field, (serializers.BaseSerializer, fields.Field)):
        return serializer_or_field()
    else:
        return serializer_or_field


def is_serializer(obj) -> bool:
    return isinstance(force_instance(obj), serializers.BaseSerializer)


def is_list_serializer(obj) -> bool:
    return isinstance(force_instance(obj), serializers.ListSerializer)


def get_doc(obj) -> str:
    """ doc string of the class itself. base class doc strings are not inherited. """
    doc = get_class(obj).__dict__.get('__doc__')
    return inspect.cleandoc(doc) if isinstance(doc, str) else ''


def get_type_hints(obj) -> dict:
    """ unpack wrapped partial object and use actual func object """
    if isinstance(obj, functools.partial):
        obj = obj.func
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError) as exc:
        warn(f'unable to resolve type hints of "{obj}" ({exc}).')
        return {}


def get_qualified_name(obj) -> str:
    cls = get_class(obj)
    return f'{cls.__module__}.{cls.__qualname__}'


def get_type_name(obj, use_full_type_names: bool = False) -> str:
    """
    Naming strategy for schema document keys. Short names follow the usual component
    naming: an explicit ``Meta.ref_name`` wins, otherwise the class name with the
    ``Serializer`` suffix removed.
    """
    if use_full_type_names:
        return get_qualified_name(obj)

    cls = get_class(obj)
    ref_name = getattr(getattr(cls, 'Meta', None), 'ref_name', None)
    if ref_name is not None:
        return ref_name

    name = cls.__name__
    if issubclass(cls, serializers.BaseSerializer) and name.endswith('Serializer') and name != 'Serializer':
        name = name[:-10]
    return name


def lower_first(name: str) -> str:
    """ lower-case only the first character, e.g. "ObjectType" -> "objectType" """
    return name[:1].lower() + name[1:]


def get_schema_container(result: dict) -> Tuple[dict, str, str]:
    """
    Locate the type-keyed schema mapping within a document. Returns the mapping together
    with the matching ``$ref`` prefix and discriminator format. Anything that is neither
    a Swagger 2.0 nor an OpenAPI 3 document is treated as a bare mapping.
    """
    if 'swagger' in result or 'definitions' in result:
        return result.setdefault('definitions', {}), SWAGGER_REF_PREFIX, 'string'
    elif 'openapi' in result or 'components' in result:
        components = result.setdefault('components', {})
        return components.setdefault('schemas', {}), OPENAPI_REF_PREFIX, 'object'
    else:
        return (
            result,
            polymorphism_settings.REF_PREFIX,
            polymorphism_settings.DISCRIMINATOR_FORMAT,
        )


def is_basic_type(obj: Any) -> bool:
    return isinstance(obj, collections.abc.Hashable) and obj in PYTHON_TYPE_MAPPING


def build_basic_type(obj: Any) -> dict:
    """ schema template of a basic python type. unknown types become strings. """
    if is_basic_type(obj):
        return dict(PYTHON_TYPE_MAPPING[obj])
    warn(f'could not resolve type for "{obj}". defaulting to "string"')
    return dict(PYTHON_TYPE_MAPPING[str])


def build_array_type(schema: dict) -> dict:
    return {'type': 'array', 'items': schema}


def build_object_type(properties=None, required=None, description=None, **kwargs):
    schema = {'type': 'object'}
    if description:
        schema['description'] = description.strip()
    schema['properties'] = properties or {}
    if required:
        schema['required'] = sorted(required)
    schema.update(kwargs)
    return schema


def _get_json_type(value) -> Optional[str]:
    # bool is a subclass of int
    if isinstance(value, bool):
        return 'boolean'
    elif isinstance(value, int):
        return 'integer'
    elif isinstance(value, (float, Decimal)):
        return 'number'
    elif isinstance(value, str):
        return 'string'
    return None


def build_enum_type(choices) -> dict:
    """ ``type`` is only given when all choices agree on it """
    choices = list(choices)
    json_types = {_get_json_type(choice) for choice in choices}
    if json_types == {'integer', 'number'}:
        json_types = {'number'}

    schema = {'enum': choices}
    if len(json_types) == 1 and None not in json_types:
        schema['type'] = json_types.pop()
    return schema


def build_choice_field(field) -> dict:
    choices = list(dict.fromkeys(field.choices))
    if getattr(field, 'allow_blank', False) and '' not in choices:
        choices.append('')
    return build_enum_type(choices)


def safe_ref(schema: dict) -> dict:
    """
    ensure that $ref has its own context and does not remove potential sibling
    entries when $ref is substituted.
    """
    if '$ref' in schema and len(schema) > 1:
        return {'allOf': [{'$ref': schema.pop('$ref')}], **schema}
    return schema


def append_meta(schema: dict, meta: dict) -> dict:
    return safe_ref({**schema, **meta})
