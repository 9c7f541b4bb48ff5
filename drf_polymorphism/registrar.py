import dataclasses
import inspect
import types
import typing
from abc import ABCMeta, abstractmethod
from enum import Enum
from typing import Any, Tuple

from rest_framework import serializers
from rest_framework.fields import _UnvalidatedField

from drf_polymorphism.drainage import error, warn
from drf_polymorphism.lookup import SchemaLookup
from drf_polymorphism.plumbing import (
    append_meta, build_array_type, build_basic_type, build_choice_field, build_enum_type,
    build_object_type, force_instance, get_class, get_doc, get_qualified_name, get_type_hints,
    is_basic_type, is_list_serializer, is_serializer, safe_ref,
)

# types.UnionType was added in Python 3.10 for new PEP 604 pipe union syntax
if hasattr(types, 'UnionType'):
    UNION_TYPES: Tuple[Any, ...] = (typing.Union, types.UnionType)  # type: ignore
else:
    UNION_TYPES = (typing.Union,)

# checked in order, so subclasses must precede their base classes
SERIALIZER_FIELD_MAPPING = [
    (serializers.BooleanField, {'type': 'boolean'}),
    (serializers.IntegerField, {'type': 'integer'}),
    (serializers.FloatField, {'type': 'number', 'format': 'double'}),
    (serializers.DecimalField, {'type': 'number', 'format': 'double'}),
    (serializers.DateTimeField, {'type': 'string', 'format': 'date-time'}),
    (serializers.DateField, {'type': 'string', 'format': 'date'}),
    (serializers.TimeField, {'type': 'string', 'format': 'time'}),
    (serializers.DurationField, {'type': 'string', 'format': 'duration'}),
    (serializers.EmailField, {'type': 'string', 'format': 'email'}),
    (serializers.URLField, {'type': 'string', 'format': 'uri'}),
    (serializers.UUIDField, {'type': 'string', 'format': 'uuid'}),
    (serializers.IPAddressField, {'type': 'string'}),
    (serializers.PrimaryKeyRelatedField, {'type': 'integer'}),
    (serializers.HyperlinkedRelatedField, {'type': 'string', 'format': 'uri'}),
    (serializers.SlugRelatedField, {'type': 'string'}),
    (serializers.StringRelatedField, {'type': 'string'}),
    (serializers.JSONField, {}),
    (serializers.CharField, {'type': 'string'}),
]


class SchemaRegistrar(metaclass=ABCMeta):
    """
    Generates and inserts the schema of a type that is missing from a schema document.
    ``ensure_registered`` must be idempotent and must not touch existing entries.
    """

    def __init__(self, lookup: SchemaLookup):
        self.lookup = lookup

    @abstractmethod
    def ensure_registered(self, document: dict, type_descriptor) -> None:
        pass  # pragma: no cover


class DefaultSchemaRegistrar(SchemaRegistrar):
    """
    Produces flat object schemas for DRF serializers and for annotated classes
    (including dataclasses). Nested types are registered recursively and referenced.
    Types that cannot be mapped are reported and left unregistered.
    """

    def ensure_registered(self, document: dict, type_descriptor) -> None:
        key = self.lookup.get_key(type_descriptor)
        if key in document:
            return

        if is_serializer(type_descriptor):
            mapper = self._map_serializer
        elif inspect.isclass(type_descriptor) and get_type_hints(type_descriptor):
            mapper = self._map_annotated_class
        else:
            warn(
                f'could not generate a schema for "{get_qualified_name(type_descriptor)}". '
                f'Only serializers and classes with type annotations are supported.'
            )
            return

        # insert upfront so that self-referencing types terminate
        schema = document[key] = build_object_type()
        schema.update(mapper(document, type_descriptor))

    def _map_serializer(self, document, serializer):
        serializer = force_instance(serializer)
        required = set()
        properties = {}

        for field in serializer.fields.values():
            # response schemas only
            if isinstance(field, serializers.HiddenField) or field.write_only:
                continue

            schema = self._map_serializer_field(document, field)
            if schema is None:
                continue

            if field.required or field.read_only:
                required.add(field.field_name)

            properties[field.field_name] = safe_ref(schema)

        return build_object_type(
            properties=properties,
            required=required,
            description=get_doc(serializer),
        )

    def _map_serializer_field(self, document, field):
        meta = self._get_serializer_field_meta(field)

        if is_list_serializer(field):
            return append_meta(build_array_type(self._map_nested(document, field.child)), meta)

        if is_serializer(field):
            return append_meta(self._map_nested(document, field), meta)

        if isinstance(field, serializers.ManyRelatedField):
            content = self._map_serializer_field(document, field.child_relation)
            return append_meta(build_array_type(content), meta)

        if isinstance(field, serializers.MultipleChoiceField):
            return append_meta(build_array_type(build_choice_field(field)), meta)

        if isinstance(field, serializers.ChoiceField):
            return append_meta(build_choice_field(field), meta)

        if isinstance(field, serializers.ListField):
            if isinstance(field.child, _UnvalidatedField):
                content = build_basic_type(typing.Any)
            else:
                content = self._map_serializer_field(document, field.child)
            return append_meta(build_array_type(content), meta)

        if isinstance(field, serializers.DictField):
            content = build_basic_type(dict)
            if not isinstance(field.child, _UnvalidatedField):
                content['additionalProperties'] = self._map_serializer_field(document, field.child)
            return append_meta(content, meta)

        if isinstance(field, serializers.SerializerMethodField):
            method = getattr(field.parent, field.method_name, None)
            if method is None:
                error(
                    f'SerializerMethodField "{field.field_name}" is missing required method '
                    f'"{field.method_name}". defaulting to "string".'
                )
                return append_meta(build_basic_type(str), meta)
            hints = get_type_hints(method)
            if 'return' not in hints:
                warn(
                    f'unable to resolve type hint for function "{method.__name__}". Consider '
                    f'adding a return type hint. Defaulting to string.'
                )
                return append_meta(build_basic_type(str), meta)
            return append_meta(self._map_type_hint(document, hints['return']), meta)

        for field_class, schema in SERIALIZER_FIELD_MAPPING:
            if isinstance(field, field_class):
                return append_meta(dict(schema), meta)

        warn(f'could not resolve serializer field "{field}". Defaulting to "string"')
        return append_meta(build_basic_type(str), meta)

    def _get_serializer_field_meta(self, field):
        meta = {}
        if field.read_only:
            meta['readOnly'] = True
        if field.allow_null:
            meta.update(self._get_nullable_meta())
        if field.help_text:
            meta['description'] = str(field.help_text)
        return meta

    def _get_nullable_meta(self):
        if self.lookup.is_swagger2:
            return {'x-nullable': True}
        return {'nullable': True}

    def _map_annotated_class(self, document, klass):
        required = []
        properties = {}

        for name, hint in get_type_hints(klass).items():
            if name.startswith('_') or typing.get_origin(hint) is typing.ClassVar:
                continue
            properties[name] = safe_ref(self._map_type_hint(document, hint))
            if not self._has_default(klass, name):
                required.append(name)

        description = get_doc(klass)
        # dataclasses generate their signature as doc string if none is given
        if dataclasses.is_dataclass(klass) and description.startswith(f'{klass.__name__}('):
            description = ''

        return build_object_type(
            properties=properties,
            required=required,
            description=description,
        )

    def _has_default(self, klass, name) -> bool:
        if dataclasses.is_dataclass(klass):
            for field in dataclasses.fields(klass):
                if field.name == name:
                    return (
                        field.default is not dataclasses.MISSING
                        or field.default_factory is not dataclasses.MISSING
                    )
        return hasattr(klass, name)

    def _map_type_hint(self, document, hint):
        origin, args = typing.get_origin(hint), typing.get_args(hint)

        if origin is None and is_basic_type(hint):
            return build_basic_type(hint)
        elif origin in (list, set, frozenset, tuple) or hint in (list, set, frozenset, tuple):
            return build_array_type(
                self._map_type_hint(document, args[0]) if args else build_basic_type(typing.Any)
            )
        elif origin is dict:
            schema = build_basic_type(dict)
            if args and args[1] is not typing.Any:
                schema['additionalProperties'] = self._map_type_hint(document, args[1])
            return schema
        elif origin is typing.Literal:
            return build_enum_type(args)
        elif origin in UNION_TYPES:
            type_args = [arg for arg in args if arg is not type(None)]  # noqa: E721
            if len(type_args) > 1 and self.lookup.is_swagger2:
                warn(
                    f'Swagger 2.0 does not support "oneOf". Only the first type of "{hint}" '
                    f'is used.'
                )
                schema = self._map_type_hint(document, type_args[0])
            elif len(type_args) > 1:
                schema = {'oneOf': [self._map_type_hint(document, arg) for arg in type_args]}
            else:
                schema = self._map_type_hint(document, type_args[0])
            if type(None) in args:
                schema = append_meta(schema, self._get_nullable_meta())
            return schema
        elif inspect.isclass(hint) and issubclass(hint, Enum):
            return build_enum_type([item.value for item in hint])
        elif inspect.isclass(hint):
            return self._map_nested(document, hint)
        else:
            warn(f'could not resolve type hint "{hint}". defaulting to "string"')
            return build_basic_type(str)

    def _map_nested(self, document, obj):
        self.ensure_registered(document, get_class(obj))
        if self.lookup.get_key(obj) not in document:
            return build_basic_type(dict)
        return self.lookup.get_ref(obj)
