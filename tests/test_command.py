import json
import tempfile

import pytest
import yaml
from django.core import management
from django.core.management import CommandError
from django.urls import path
from rest_framework.decorators import api_view

from drf_polymorphism.registry import TypeRegistry
from drf_polymorphism.settings import patched_settings
from tests import build_absolute_file_path
from tests.urls import AnimalSerializer

SCHEMA_FILE = build_absolute_file_path('tests/test_command.yml')


def test_command_plain(capsys):
    management.call_command('polymorphism', SCHEMA_FILE, validate=True, fail_on_warn=True)
    schema = yaml.load(capsys.readouterr().out, Loader=yaml.SafeLoader)

    definitions = schema['definitions']
    assert set(definitions) == {'Animal', 'Owner', 'Dog', 'Cat'}
    assert definitions['Animal']['discriminator'] == 'objectType'
    assert definitions['Animal']['required'] == ['objectType']
    assert definitions['Dog']['allOf'][0] == {'$ref': '#/definitions/Animal'}
    assert definitions['Dog']['allOf'][1]['properties'] == {'breed': {'type': 'string'}}
    assert definitions['Dog']['properties'] == {}
    # everything outside of the definitions stays as is
    assert schema['paths']['/owner/']['get']['responses']['200']['schema'] == {
        '$ref': '#/definitions/Owner'
    }


def test_command_parameterized():
    document = {
        'openapi': '3.0.3',
        'info': {'title': 'zoo', 'version': '1.0.0'},
        'paths': {},
        'components': {'schemas': {
            'Animal': {'type': 'object', 'properties': {'name': {'type': 'string'}}},
        }},
    }
    with tempfile.NamedTemporaryFile('w', suffix='.json') as input_fh:
        json.dump(document, input_fh)
        input_fh.flush()

        with tempfile.NamedTemporaryFile() as fh:
            management.call_command(
                'polymorphism',
                input_fh.name,
                '--validate',
                '--fail-on-warn',
                '--format=openapi-json',
                '--urlconf=tests.urls',
                '--file=' + fh.name,
            )
            schema = json.loads(fh.read())

    schemas = schema['components']['schemas']
    assert schemas['Animal']['discriminator'] == {'propertyName': 'objectType'}
    assert schemas['Cat']['allOf'][0] == {'$ref': '#/components/schemas/Animal'}


def test_command_full_type_names(capsys):
    document = {'definitions': {'tests.urls.AnimalSerializer': {'type': 'object', 'properties': {}}}}
    with tempfile.NamedTemporaryFile('w', suffix='.yml') as input_fh:
        yaml.dump(document, input_fh)
        input_fh.flush()
        management.call_command('polymorphism', input_fh.name, '--use-full-type-names')

    schema = yaml.load(capsys.readouterr().out, Loader=yaml.SafeLoader)
    assert 'tests.urls.DogSerializer' in schema['definitions']


def test_command_fail(capsys):
    with pytest.raises(CommandError):
        management.call_command(
            'polymorphism',
            SCHEMA_FILE,
            '--fail-on-warn',
            '--urlconf=tests.test_command',
        )
    stderr = capsys.readouterr().err
    assert 'unable to guess serializer' in stderr
    assert 'Polymorphism rewrite summary:' in stderr


def test_command_no_document():
    with tempfile.NamedTemporaryFile('w', suffix='.yml') as input_fh:
        input_fh.write('- just\n- a list\n')
        input_fh.flush()
        with pytest.raises(CommandError, match='does not contain a schema document'):
            management.call_command('polymorphism', input_fh.name)


class Opaque:
    pass


def test_command_inconsistent_registry(capsys):
    registry = TypeRegistry()
    registry.register(AnimalSerializer, subtypes=[Opaque], discriminator='Kind')

    with patched_settings({'TYPE_REGISTRY': registry}):
        with pytest.raises(CommandError, match='tests.test_command.Opaque'):
            management.call_command('polymorphism', SCHEMA_FILE)

    assert 'could not generate a schema for "tests.test_command.Opaque"' in capsys.readouterr().err


@api_view(['GET'])
def func(request):
    pass  # pragma: no cover


urlpatterns = [path('func', func)]
