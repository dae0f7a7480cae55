"""Tests for define_schema(), constructors, methods and extension."""
import pytest

from schemaobject import (
    SchemaDefinitionError,
    SchemaObjectInstance,
    define_schema,
    extend_factory,
)


def greet(self):
    return f"hi {self.name}"


class TestDefineSchema:
    """Factory generation."""

    def test_returns_factory_class(self):
        Person = define_schema({'name': str}, name='Person')
        assert issubclass(Person, SchemaObjectInstance)
        assert Person.__name__ == 'Person'
        assert isinstance(Person(), Person)

    def test_class_level_schema_and_options(self):
        Person = define_schema({'name': str}, strict=False)
        assert list(Person.schema) == ['name']
        assert Person.options.strict is False

    def test_instances_share_schema(self):
        Person = define_schema({'name': str})
        assert type(Person()).schema is type(Person()).schema

    def test_class_repr(self):
        Person = define_schema({'name': str, 'age': int}, name='Person')
        assert repr(Person) == "<schema 'Person' fields=(name, age)>"

    def test_unknown_option(self):
        with pytest.raises(SchemaDefinitionError, match='Unknown schema option'):
            define_schema({'name': str}, strictness=True)

    def test_schema_must_be_mapping(self):
        with pytest.raises(SchemaDefinitionError, match='mapping'):
            define_schema(['name'])

    def test_declarations_not_mutated(self):
        declarations = {'name': {'type': {'type': str, 'max_length': 3}}, 'addr': {'city': str}}
        define_schema(declarations)
        assert declarations == {'name': {'type': {'type': str, 'max_length': 3}}, 'addr': {'city': str}}


class TestMethods:
    """Custom methods on generated classes."""

    def test_method_bound_to_instance(self):
        Person = define_schema({'name': str}, methods={'greet': greet})
        assert Person({'name': 'Ada'}).greet() == 'hi Ada'

    @pytest.mark.parametrize('method_name', ['to_object', 'populate', 'extend', '__init__'])
    def test_clash_with_existing_attribute(self, method_name):
        with pytest.raises(SchemaDefinitionError, match='Cannot overwrite'):
            define_schema({'name': str}, methods={method_name: greet})

    def test_method_must_be_callable(self):
        with pytest.raises(SchemaDefinitionError, match='callable'):
            define_schema({'name': str}, methods={'greet': 'hello'})


class TestConstructors:
    """Default and named constructors."""

    def test_named_constructor(self):
        def from_full_name(self, full_name):
            first, last = full_name.split(' ', 1)
            self.populate({'first': first, 'last': last})

        Person = define_schema({'first': str, 'last': str}, constructors={'from_full_name': from_full_name})
        person = Person.from_full_name('Ada Lovelace')
        assert isinstance(person, Person)
        assert person.to_object() == {'first': 'Ada', 'last': 'Lovelace'}

    def test_default_constructor_replaced(self):
        def default(self, values):
            self.populate(values)
            self.source = 'factory'

        Record = define_schema({'id': int, 'source': str}, constructors={'default': default})
        assert Record({'id': '3'}).to_object() == {'id': 3, 'source': 'factory'}

    def test_named_constructor_runs_default_first(self):
        calls = []

        def default(self, values):
            calls.append(('default', values))

        def build(self, value):
            calls.append(('build', value))

        Record = define_schema({'id': int}, constructors={'default': default, 'build': build})
        Record.build(5)
        assert calls == [('default', None), ('build', 5)]

    def test_constructor_clash(self):
        with pytest.raises(SchemaDefinitionError, match='Cannot overwrite'):
            define_schema({'id': int}, constructors={'schema': lambda self: None})


class TestExtension:
    """Deriving factories from a base."""

    @pytest.fixture
    def Base(self):
        return define_schema(
            {'name': {'type': str, 'max_length': 10}, 'tags': [str]},
            name='Base',
            methods={'greet': greet},
        )

    def test_adds_fields(self, Base):
        Derived = Base.extend({'age': int}, name='Derived')
        obj = Derived({'name': 'Ada', 'age': '36'})
        assert obj.to_object() == {'name': 'Ada', 'age': 36}
        assert Derived.__name__ == 'Derived'

    def test_base_untouched(self, Base):
        Base.extend({'age': int})
        assert 'age' not in Base.schema
        assert Base({'age': 3}).age is None

    def test_declarations_merge_recursively(self, Base):
        Derived = Base.extend({'name': {'min_length': 2}})
        spec = Derived.schema['name']
        assert spec.min_length == 2
        assert spec.max_length == 10

    def test_inherits_methods(self, Base):
        Derived = Base.extend({'age': int})
        assert Derived({'name': 'Ada'}).greet() == 'hi Ada'

    def test_override_receives_base_implementation(self, Base):
        Derived = Base.extend({}, methods={'greet': lambda self, base: base() + '!'})
        assert Derived({'name': 'Ada'}).greet() == 'hi Ada!'
        assert Base({'name': 'Ada'}).greet() == 'hi Ada'

    def test_options_override(self, Base):
        Derived = Base.extend({}, emit_undefined=True)
        assert Derived().to_object() == {'name': None, 'tags': []}
        assert Base.options.emit_undefined is False

    def test_derived_is_distinct_factory(self, Base):
        Derived = Base.extend({})
        assert Derived is not Base
        assert not isinstance(Derived(), Base)

    def test_extend_requires_factory(self):
        with pytest.raises(SchemaDefinitionError, match='not a schema factory'):
            extend_factory(dict, {})
        with pytest.raises(SchemaDefinitionError, match='not a schema factory'):
            extend_factory(SchemaObjectInstance, {})
