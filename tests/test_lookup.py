import pytest
from rest_framework import serializers

from drf_polymorphism.lookup import SchemaLookup
from drf_polymorphism.plumbing import SchemaNotFoundError, UnableToProceedError
from drf_polymorphism.settings import patched_settings


class Shape:
    sides: int


class CircleSerializer(serializers.Serializer):
    radius = serializers.FloatField()


class LegacySerializer(serializers.Serializer):
    class Meta:
        ref_name = 'LegacyShape'


class Outer:
    class Inner:
        pass


def test_short_names():
    lookup = SchemaLookup(use_full_type_names=False)
    assert lookup.get_key(Shape) == 'Shape'
    assert lookup.get_key(CircleSerializer) == 'Circle'
    assert lookup.get_key(CircleSerializer()) == 'Circle'
    assert lookup.get_key(LegacySerializer) == 'LegacyShape'
    assert lookup.get_key(Outer.Inner) == 'Inner'


def test_full_names():
    lookup = SchemaLookup(use_full_type_names=True)
    assert lookup.get_key(Shape) == 'tests.test_lookup.Shape'
    assert lookup.get_key(CircleSerializer) == 'tests.test_lookup.CircleSerializer'
    assert lookup.get_key(Outer.Inner) == 'tests.test_lookup.Outer.Inner'


def test_ref():
    assert SchemaLookup(ref_prefix='#/definitions/').get_ref(Shape) == {
        '$ref': '#/definitions/Shape'
    }
    assert SchemaLookup(ref_prefix='#/components/schemas/').get_ref(CircleSerializer) == {
        '$ref': '#/components/schemas/Circle'
    }


def test_defaults_from_settings():
    lookup = SchemaLookup()
    assert lookup.use_full_type_names is False
    assert lookup.ref_prefix == '#/definitions/'

    with patched_settings({'USE_FULL_TYPE_NAMES': True, 'REF_PREFIX': '#/components/schemas/'}):
        lookup = SchemaLookup()
    assert lookup.get_ref(Shape) == {'$ref': '#/components/schemas/tests.test_lookup.Shape'}


def test_try_resolve():
    document = {'Shape': {'type': 'object'}}
    lookup = SchemaLookup(use_full_type_names=False)
    assert lookup.try_resolve(document, Shape) is document['Shape']
    assert lookup.try_resolve(document, CircleSerializer) is None


def test_resolve_or_fail():
    document = {'Shape': {'type': 'object'}}
    lookup = SchemaLookup(use_full_type_names=False)
    assert lookup.resolve_or_fail(document, Shape) is document['Shape']

    with pytest.raises(SchemaNotFoundError) as excinfo:
        lookup.resolve_or_fail(document, CircleSerializer)
    assert excinfo.value.type_name == 'tests.test_lookup.CircleSerializer'
    assert isinstance(excinfo.value, LookupError)
    assert isinstance(excinfo.value, UnableToProceedError)


def test_try_resolve_ref():
    document = {'Shape': {'type': 'object'}}
    lookup = SchemaLookup(ref_prefix='#/definitions/')
    assert lookup.try_resolve_ref(document, '#/definitions/Shape') is document['Shape']
    assert lookup.try_resolve_ref(document, '#/definitions/Circle') is None
    assert lookup.try_resolve_ref(document, '#/components/schemas/Shape') is None


def test_document_flavor():
    assert SchemaLookup(ref_prefix='#/definitions/').is_swagger2
    assert not SchemaLookup(ref_prefix='#/components/schemas/').is_swagger2
