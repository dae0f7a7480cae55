"""Pytest configuration and shared fixtures."""
import pytest

import schemaobject.config as config_module
from schemaobject import define_schema


@pytest.fixture(autouse=True)
def reset_default_options():
    """Restore process-wide default options after each test."""
    original = dict(config_module._default_overrides)

    yield

    config_module._default_overrides.clear()
    config_module._default_overrides.update(original)


@pytest.fixture
def user_factory():
    """A schema exercising every field type."""
    return define_schema({
        'name': {'type': str, 'min_length': 2, 'max_length': 20},
        'age': {'type': int, 'min': 0, 'max': 150},
        'active': bool,
        'joined': 'date',
        'tags': {'type': [str], 'unique': True},
        'address': {
            'city': {'type': str, 'min_length': 2},
            'zip': {'type': str, 'regex': r'^\d{5}$'},
        },
        'meta': {},
        'notes': None,
    }, name='User')


@pytest.fixture
def user(user_factory):
    """A populated user instance."""
    return user_factory({
        'name': 'Ada',
        'age': '36',
        'active': 'true',
        'tags': ['math', 'engines'],
        'address': {'city': 'London', 'zip': '12345'},
    })
