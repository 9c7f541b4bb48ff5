import django
import pytest


def pytest_configure(config):
    from django.conf import settings

    settings.configure(
        DEBUG_PROPAGATE_EXCEPTIONS=True,
        DATABASES={'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:'
        }},
        SITE_ID=1,
        SECRET_KEY='not very secret in tests',
        USE_I18N=True,
        STATIC_URL='/static/',
        ROOT_URLCONF='tests.urls',
        INSTALLED_APPS=(
            'django.contrib.auth',
            'django.contrib.contenttypes',
            'rest_framework',
            'drf_polymorphism',
            'tests',
        ),
        POLYMORPHISM_SETTINGS={
            'TYPE_REGISTRY': 'tests.urls.registry',
        },
        DEFAULT_AUTO_FIELD='django.db.models.AutoField',
        SILENCED_SYSTEM_CHECKS=['rest_framework.W001'],
    )

    django.setup()


@pytest.fixture(autouse=True)
def reset_stats():
    """ warnings are de-duplicated across the process, so start every test afresh """
    from drf_polymorphism.drainage import reset_generator_stats
    reset_generator_stats()
    yield
    reset_generator_stats()


@pytest.fixture()
def no_warnings(capsys):
    """ make sure test emits no warnings """
    yield capsys
    captured = capsys.readouterr()
    assert not captured.out
    assert not captured.err


@pytest.fixture()
def warnings(capsys):
    """ make sure test emits warnings """
    yield capsys
    captured = capsys.readouterr()
    assert captured.err
