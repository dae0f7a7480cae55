"""Tests for the error ledger and validation error records."""
import dataclasses

import pytest

from schemaobject import ErrorLedger, ValidationError, ValidationRule, define_schema


class TestLedger:
    """Per-instance error collection."""

    def test_one_error_per_rejection(self, user):
        user.name = 'A'
        user.name = 'x' * 50
        user.name = 'Grace'
        errors = user.get_errors()
        assert [error.rule for error in errors] == [ValidationRule.MIN_LENGTH, ValidationRule.MAX_LENGTH]
        assert user.name == 'Grace'

    def test_error_fields(self, user):
        user.age = 'abc'
        error = user.get_errors()[0]
        assert error.field == 'age'
        assert error.value == 'abc'
        assert error.original_value == 36
        assert error.field_spec is type(user).schema['age']
        assert str(error) == f"age: {error.message}"

    def test_clear_errors(self, user):
        user.age = 'abc'
        user.address.city = 'x'
        assert user.has_errors()
        user.clear_errors()
        assert not user.has_errors()
        assert user.get_errors() == []
        assert not user.address.has_errors()

    def test_instances_do_not_share_ledgers(self, user_factory):
        first, second = user_factory(), user_factory()
        first.age = 'abc'
        assert first.has_errors()
        assert not second.has_errors()

    def test_constructor_rejections_recorded(self, user_factory):
        obj = user_factory({'age': -5, 'name': 'Ada'})
        assert obj.age is None
        assert obj.get_errors()[0].rule is ValidationRule.MIN


class TestNestedAggregation:
    """Errors of nested instances surface with qualified paths."""

    def test_nested_path(self):
        Factory = define_schema({'addr': {'city': {'type': str, 'min_length': 2}}})
        obj = Factory()
        obj.addr = {'city': 'x'}
        assert obj.addr.city is None
        errors = obj.get_errors()
        assert len(errors) == 1
        assert errors[0].field == 'addr.city'
        assert errors[0].rule is ValidationRule.MIN_LENGTH

    def test_deep_nesting(self):
        Factory = define_schema({'a': {'b': {'c': int}}})
        obj = Factory()
        obj.a.b.c = 'nope'
        assert [error.field for error in obj.get_errors()] == ['a.b.c']
        assert [error.field for error in obj.a.get_errors()] == ['b.c']

    def test_own_errors_come_first(self, user):
        user.address.zip = 'abc'
        user.age = 'abc'
        assert [error.field for error in user.get_errors()] == ['age', 'address.zip']

    def test_reading_errors_does_not_create_nested_instances(self, user_factory):
        obj = user_factory()
        obj.get_errors()
        store = object.__getattribute__(obj, '_store')
        assert 'address' not in store


class TestValidationError:
    """ValidationError is an immutable record."""

    @pytest.fixture
    def error(self, user_factory):
        return ValidationError(
            message='bad',
            value=1,
            original_value=None,
            field_spec=user_factory.schema['age'],
            field='age',
        )

    def test_frozen(self, error):
        with pytest.raises(dataclasses.FrozenInstanceError):
            error.message = 'other'

    def test_default_rule(self, error):
        assert error.rule is ValidationRule.TYPE

    def test_qualified_returns_copy(self, error):
        qualified = error.qualified('person')
        assert qualified.field == 'person.age'
        assert error.field == 'age'

    def test_ledger_iterates_snapshot(self, error):
        ledger = ErrorLedger()
        ledger.append(error)
        for entry in ledger:
            ledger.append(entry)
        assert len(ledger) == 2
        assert bool(ledger)
        ledger.clear()
        assert not ledger
