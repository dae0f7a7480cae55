"""Tests for schema options, process-wide defaults and hook invocation."""
import pytest

from schemaobject import (
    SchemaDefinitionError,
    SchemaOptions,
    define_schema,
    get_default_options,
    reset_default_options,
    set_default_options,
)
from schemaobject.hooks import call_hook


class TestSchemaOptions:
    """The options record."""

    def test_defaults(self):
        options = SchemaOptions()
        assert options.strict is True
        assert options.dot_notation is False
        assert options.emit_undefined is False
        assert options.preserve_null is False
        assert options.case_insensitive_keys is False
        assert options.inherit_root_context is False
        assert options.constructors == {}
        assert options.methods == {}

    def test_inherited_drops_output_registries(self):
        options = SchemaOptions(
            strict=False,
            output_transform=lambda result: result,
            methods={'m': lambda self: None},
        )
        inherited = options.inherited()
        assert inherited.strict is False
        assert inherited.inherit_root_context is True
        assert inherited.output_transform is None
        assert inherited.methods == {}
        assert options.methods != {}

    def test_non_callable_hook(self):
        with pytest.raises(SchemaDefinitionError, match='before_value_set'):
            define_schema({'name': str}, before_value_set='nope')


class TestDefaultOptions:
    """Process-wide defaults layer."""

    def test_defaults_apply_to_new_factories(self):
        set_default_options(emit_undefined=True)
        Factory = define_schema({'name': str})
        assert Factory().to_object() == {'name': None}

    def test_explicit_options_win(self):
        set_default_options(emit_undefined=True)
        Factory = define_schema({'name': str}, emit_undefined=False)
        assert Factory().to_object() == {}

    def test_existing_factories_unaffected(self):
        Factory = define_schema({'name': str})
        set_default_options(emit_undefined=True)
        assert Factory().to_object() == {}

    def test_reset(self):
        set_default_options(strict=False)
        reset_default_options()
        assert get_default_options().strict is True

    def test_unknown_default_option(self):
        with pytest.raises(SchemaDefinitionError, match='bogus'):
            set_default_options(bogus=1)

    def test_default_methods_copied_per_factory(self):
        set_default_options(methods={'ping': lambda self: 'pong'})
        First = define_schema({})
        Second = define_schema({})
        assert First().ping() == 'pong'
        assert First.options.methods is not Second.options.methods

    def test_fixture_restores_defaults(self):
        assert get_default_options() == SchemaOptions()


class TestCallHook:
    """Hooks receive as many leading arguments as they require."""

    def test_fewer_parameters(self):
        assert call_hook(lambda value: value * 2, 2, 'ignored', 'ignored') == 4

    def test_all_parameters(self):
        assert call_hook(lambda a, b, c: (a, b, c), 1, 2, 3) == (1, 2, 3)

    def test_optional_parameters_keep_defaults(self):
        assert call_hook(lambda a, b=5: (a, b), 1, 2) == (1, 5)

    def test_var_positional_receives_everything(self):
        assert call_hook(lambda *args: args, 1, 2, 3) == (1, 2, 3)

    def test_builtin_method(self):
        assert call_hook(str.strip, '  padded  ', 'ignored') == 'padded'

    def test_callable_object(self):
        class Doubler:
            def __call__(self, value):
                return value * 2

        assert call_hook(Doubler(), 3, 'ignored') == 6

    def test_builtin_without_signature_gets_leading_value(self):
        assert call_hook(int, '5', 'original', 'spec', 'root') == 5
        assert call_hook(bool, 0, 'array') is False

    def test_all_optional_parameters_get_leading_value(self):
        assert call_hook(lambda value=None: value, 7, 'ignored') == 7
