#  -*- coding: utf-8 -*-
"""
Comprehensive test suite for TypeAnalyzer.

Tests cover:
- Field discovery (annotations, slots, ClassVar, private fields)
- Accessor discovery (get/is/set, bean and snake case, length rule)
- Descriptor discovery (property, cached_property, custom descriptors)
- Inheritance: parent links, shadowing, merging, multiple inheritance
- Ordering of merged properties (natural and declared)
- Lookup helpers and edge cases
"""

from __future__ import annotations

import functools
import inspect

import pytest
from typing import ClassVar

from proplens import (analyze,
                      cache_scope,
                      property_order,
                      AnalysisSettings,
                      PropertyDescriptor,
                      TypeAnalyzer)


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def hierarchy() -> tuple[type, type, type]:
    """Three-level hierarchy with a shadowed property."""

    class Entity:
        id: int
        label: str

        def get_created(self) -> str:
            return 'yesterday'

    class Person(Entity):
        name: str

        def getLabel(self) -> str:
            return 'person'

        def isActive(self) -> bool:
            return True

    class Employee(Person):
        salary: int

        def setManager(self, value: Person) -> None:
            self._manager = value

    return Entity, Person, Employee


def names(cls: type) -> list[str]:
    return [prop.name for prop in analyze(cls).get_properties()]


# ========== ========== ========== ========== Fields
class TestFieldDiscovery:
    """Test properties coming from declared fields."""

    def test_field_only_property(self) -> None:
        # A lone field makes a property backed solely by that field
        class Counter:
            count: int

        prop = analyze(Counter).get_property('count')

        assert prop.field is not None
        assert prop.field.name == 'count'
        assert prop.read_method is None
        assert prop.write_methods == ()

    def test_private_field_name_is_verbatim(self) -> None:
        class Counter:
            _count: int

        assert names(Counter) == ['_count']

    def test_private_fields_can_be_excluded(self) -> None:
        class Counter:
            _count: int
            total: int

        with cache_scope(AnalysisSettings(include_private_fields=False)):
            assert names(Counter) == ['total']

    def test_field_names_are_not_normalized(self) -> None:
        class Sample:
            URL: str
            Value: int

        assert names(Sample) == ['URL', 'Value']

    def test_class_variables_are_skipped(self) -> None:
        class Sample:
            registry: ClassVar[dict] = {}
            plain: ClassVar = 1
            value: int

        assert names(Sample) == ['value']

    def test_default_value_is_recorded(self) -> None:
        class Sample:
            value: int = 5
            other: int

        analyzer = analyze(Sample)

        assert analyzer.declared_field('value').default == 5
        assert not analyzer.declared_field('other').default

    def test_unannotated_class_attributes_are_not_fields(self) -> None:
        class Sample:
            constant = 3

        assert names(Sample) == []

    def test_slots_are_fields(self) -> None:
        class Point:
            __slots__ = ('x', 'y', '__secret', '__weakref__')

        analyzer = analyze(Point)

        assert analyzer.property_names() == ['_Point__secret', 'x', 'y']
        assert analyzer.declared_field('x').kind == 'slot'

    def test_string_slots(self) -> None:
        class Single:
            __slots__ = 'value'

        assert names(Single) == ['value']

    def test_slot_values_are_read_and_written(self) -> None:
        class Point:
            __slots__ = ('x',)

        point = Point()
        prop = analyze(Point).get_property('x')

        prop.write(point, 3)
        assert prop.read(point) == 3

    def test_declared_field_absent_is_none(self) -> None:
        class Sample:
            value: int

        assert analyze(Sample).declared_field('missing') is None

    def test_unresolvable_annotations_keep_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class Sample:
            value: int
            other: Undefined  # noqa: F821

        get_annotations = inspect.get_annotations

        def failing(obj, **kwargs):
            # Classes behave as under lazy annotations with an undefined name
            if isinstance(obj, type):
                raise NameError("name 'Undefined' is not defined")
            return get_annotations(obj, **kwargs)

        monkeypatch.setattr(inspect, 'get_annotations', failing)

        analyzer = analyze(Sample)

        assert analyzer.property_names() == ['other', 'value']
        assert analyzer.declared_field('value').kind == 'annotation'


# ========== ========== ========== ========== Accessors
class TestAccessorDiscovery:
    """Test properties coming from accessor methods."""

    @pytest.mark.parametrize('method_name, expected', [
        ('getName', 'name'),
        ('getURLPath', 'URLPath'),
        ('isActive', 'active'),
        ('get_name', 'name'),
        ('is_active', 'active'),
        ('getX', 'x'),
        ('isX', 'x'),
    ])
    def test_read_accessor_names(self, method_name: str, expected: str) -> None:
        def reader(self):
            return None

        Sample = type('Sample', (), {method_name: reader})

        assert names(Sample) == [expected]
        assert analyze(Sample).get_property(expected).read_method is reader

    def test_read_only_property(self) -> None:
        class Sample:
            def getCount(self) -> int:
                return 1

        prop = analyze(Sample).get_property('count')

        assert prop.field is None
        assert prop.read_method is Sample.__dict__['getCount']
        assert prop.write_methods == ()
        assert not prop.writable

    def test_write_accessor(self) -> None:
        class Sample:
            def setCount(self, value: int) -> None:
                pass

        prop = analyze(Sample).get_property('count')

        assert prop.read_method is None
        assert prop.write_methods == (Sample.__dict__['setCount'],)

    def test_accessors_and_field_merge_into_one_property(self) -> None:
        class Sample:
            count: int

            def get_count(self) -> int:
                return self.count

            def set_count(self, value: int) -> None:
                self.count = value

        analyzer = analyze(Sample)
        prop = analyzer.get_property('count')

        assert analyzer.property_names() == ['count']
        assert prop.field is not None
        assert prop.read_method is not None
        assert len(prop.write_methods) == 1

    def test_overloaded_writers_are_all_kept(self) -> None:
        class Sample:
            def set_value(self, value: int) -> None:
                pass

            def setValue(self, value: str) -> None:
                pass

        prop = analyze(Sample).get_property('value')

        assert [method.__name__ for method in prop.write_methods] == ['set_value', 'setValue']

    def test_short_names_are_skipped(self) -> None:
        # three characters or fewer, unless it is a boolean accessor
        class Sample:
            def get(self):
                return None

            def set(self, value):
                pass

            def abc(self):
                return None

        assert names(Sample) == []

    def test_min_accessor_length_setting(self) -> None:
        class Sample:
            def getX(self):
                return None

        with cache_scope(AnalysisSettings(min_accessor_length=4)):
            assert names(Sample) == []

    def test_bare_prefixes_are_not_accessors(self) -> None:
        class Sample:
            def get_(self):
                return None

            def is_(self):
                return None

        assert names(Sample) == []

    def test_wrong_arity_is_ignored(self) -> None:
        class Sample:
            def get_value(self, key):
                return key

            def is_valid(self, strict):
                return strict

            def set_value(self):
                pass

            def set_pair(self, key, value):
                pass

        assert names(Sample) == []

    def test_required_keyword_only_parameter_is_not_an_accessor(self) -> None:
        class Sample:
            def set_value(self, *, value):
                pass

            def get_total(self, *, strict):
                return strict

        assert names(Sample) == []

    def test_optional_keyword_only_parameter_is_allowed(self) -> None:
        class Sample:
            def set_value(self, value, *, strict=False):
                self.value = (value, strict)

        sample = Sample()
        prop = analyze(Sample).get_property('value')

        prop.write(sample, 1)

        assert sample.value == (1, False)

    def test_variadic_parameters_are_not_counted(self) -> None:
        class Sample:
            def get_value(self, **options):
                return options

            def set_value(self, value, *args):
                pass

            def set_items(self, *items):
                pass

        analyzer = analyze(Sample)

        assert analyzer.property_names() == ['value']
        assert analyzer.get_property('value').read(Sample()) == {}
        assert len(analyzer.get_property('value').write_methods) == 1

    def test_other_methods_are_ignored(self) -> None:
        class Sample:
            def compute(self):
                return 1

            def __init__(self):
                pass

        assert names(Sample) == []

    def test_static_and_class_methods_are_skipped(self) -> None:
        class Sample:
            @staticmethod
            def get_static():
                return 1

            @classmethod
            def get_klass(cls):
                return cls

        assert names(Sample) == []

    def test_snake_case_can_be_disabled(self) -> None:
        class Sample:
            def get_name(self):
                return None

        with cache_scope(AnalysisSettings(snake_case_accessors=False)):
            assert names(Sample) == ['_name']

    def test_prefix_match_is_literal(self) -> None:
        # Like the bean convention, any name starting with a prefix qualifies
        class Sample:
            def settle(self, amount):
                pass

        assert names(Sample) == ['tle']


# ========== ========== ========== ========== Descriptors
class TestDescriptorDiscovery:
    """Test properties coming from property-like descriptors."""

    def test_property_with_setter(self) -> None:
        class Sample:
            @property
            def size(self) -> int:
                return self._size

            @size.setter
            def size(self, value: int) -> None:
                self._size = value

        sample = Sample()
        prop = analyze(Sample).get_property('size')

        prop.write(sample, 4)

        assert prop.read(sample) == 4
        assert prop.read_method is Sample.size.fget
        assert prop.write_methods == (Sample.size.fset,)

    def test_read_only_property(self) -> None:
        class Sample:
            @property
            def size(self) -> int:
                return 1

        prop = analyze(Sample).get_property('size')

        assert prop.readable
        assert not prop.writable

    def test_cached_property(self) -> None:
        class Sample:
            @functools.cached_property
            def total(self) -> int:
                return 42

        prop = analyze(Sample).get_property('total')

        assert prop.read(Sample()) == 42
        assert prop.write_methods == ()

    def test_property_names_are_verbatim(self) -> None:
        class Sample:
            @property
            def Size(self):
                return 1

        assert names(Sample) == ['Size']

    def test_setting_descriptors(self) -> None:
        # SettingProperty exposes fget/fset like property does
        analyzer = analyze(AnalysisSettings)

        assert analyzer.property_names() == sorted(AnalysisSettings.setting_names())

        settings = AnalysisSettings()
        analyzer.get_property('unlisted_properties').write(settings, 'last')

        assert settings.unlisted_properties == 'last'

    def test_descriptors_can_be_excluded(self) -> None:
        class Sample:
            @property
            def size(self):
                return 1

        with cache_scope(AnalysisSettings(include_descriptors=False)):
            assert names(Sample) == []

    def test_nested_classes_are_ignored(self) -> None:
        class Sample:
            class Meta:
                fget = None

        assert names(Sample) == []


# ========== ========== ========== ========== Inheritance
class TestInheritance:
    """Test linking and merging along the inheritance chain."""

    def test_parent_links(self, hierarchy: tuple[type, type, type]) -> None:
        Entity, Person, Employee = hierarchy

        assert analyze(Employee).parent is analyze(Person)
        assert analyze(Person).parent is analyze(Entity)
        assert analyze(Entity).parent is analyze(object)
        assert analyze(object).parent is None

    def test_object_has_no_properties(self) -> None:
        assert analyze(object).get_properties() == ()

    def test_merged_properties(self, hierarchy: tuple[type, type, type]) -> None:
        _, _, Employee = hierarchy

        assert names(Employee) == ['active', 'created', 'id', 'label', 'manager', 'name', 'salary']

    def test_no_duplicates(self, hierarchy: tuple[type, type, type]) -> None:
        _, _, Employee = hierarchy

        merged = names(Employee)
        assert len(merged) == len(set(merged))

    def test_child_shadows_ancestor(self, hierarchy: tuple[type, type, type]) -> None:
        Entity, Person, Employee = hierarchy

        # Entity declares a 'label' field, Person a 'getLabel' accessor
        assert analyze(Person).get_property('label').declaring_type is Person
        assert analyze(Employee).get_property('label').declaring_type is Person
        assert analyze(Entity).get_property('label').declaring_type is Entity

    def test_merged_collection_keeps_child_descriptor(self, hierarchy: tuple[type, type, type]) -> None:
        _, Person, Employee = hierarchy

        label = [prop for prop in analyze(Employee).get_properties() if prop.name == 'label']

        assert len(label) == 1
        assert label[0].declaring_type is Person
        assert label[0].field is None

    def test_own_properties_are_per_level(self, hierarchy: tuple[type, type, type]) -> None:
        _, _, Employee = hierarchy

        assert sorted(analyze(Employee).own_properties) == ['manager', 'salary']

    def test_lookup_walks_ancestors(self, hierarchy: tuple[type, type, type]) -> None:
        Entity, _, Employee = hierarchy

        analyzer = analyze(Employee)

        assert analyzer.get_property('id').declaring_type is Entity
        assert analyzer.has_property('id')
        assert 'created' in analyzer
        assert not analyzer.has_property('missing')
        assert analyzer.get_property('missing') is None

    def test_declared_field_does_not_walk_ancestors(self, hierarchy: tuple[type, type, type]) -> None:
        _, _, Employee = hierarchy

        assert analyze(Employee).declared_field('id') is None

    def test_multiple_inheritance_follows_mro(self) -> None:
        class Named:
            name: str

            def get_title(self) -> str:
                return 'named'

        class Titled:
            def get_title(self) -> str:
                return 'titled'

            def get_rank(self) -> int:
                return 1

        class Officer(Named, Titled):
            pass

        analyzer = analyze(Officer)

        assert analyzer.property_names() == ['name', 'rank', 'title']
        assert analyzer.get_property('title').declaring_type is Named
        assert analyzer.get_property('rank').declaring_type is Titled
        assert [ancestor.type for ancestor in analyzer.lineage] == [Named, Titled, object]

    def test_builtin_types(self) -> None:
        assert analyze(int).get_properties() == ()
        assert analyze(dict).get_properties() == ()


# ========== ========== ========== ========== Ordering
class TestMergedOrdering:
    """Test ordering applied to merged properties."""

    def test_natural_order_is_lexicographic(self) -> None:
        class Sample:
            zeta: int
            alpha: int
            Beta: int

            def get_mid(self):
                return None

        assert names(Sample) == ['Beta', 'alpha', 'mid', 'zeta']

    def test_declared_order(self) -> None:
        @property_order('b', 'a', 'c')
        class Sample:
            a: int
            b: int
            c: int
            d: int

        merged = names(Sample)

        assert merged.index('b') < merged.index('a') < merged.index('c')
        assert merged == ['d', 'b', 'a', 'c']

    def test_declared_order_covers_inherited_properties(self) -> None:
        class Base:
            a: int
            z: int

        @property_order('z', 'b', 'a')
        class Child(Base):
            b: int

        assert names(Child) == ['z', 'b', 'a']

    def test_unlisted_last_setting(self) -> None:
        @property_order('b', 'a')
        class Sample:
            a: int
            b: int
            c: int
            d: int

        with cache_scope(AnalysisSettings(unlisted_properties='last')):
            assert names(Sample) == ['b', 'a', 'c', 'd']

    def test_declared_order_is_not_inherited_by_default(self) -> None:
        @property_order('b', 'a')
        class Base:
            a: int
            b: int

        class Child(Base):
            pass

        assert names(Child) == ['a', 'b']

    def test_inherit_property_order_setting(self) -> None:
        @property_order('b', 'a')
        class Base:
            a: int
            b: int

        class Child(Base):
            pass

        with cache_scope(AnalysisSettings(inherit_property_order=True)):
            assert names(Child) == ['b', 'a']

    def test_property_order_policy(self) -> None:
        @property_order('b', 'a')
        class Sample:
            a: int

        order = analyze(Sample).property_order()

        assert order.names == ('b', 'a')
        assert order.unlisted == 'first'


# ========== ========== ========== ========== Misc
class TestAnalyzerProtocol:
    """Test container protocol and representation."""

    def test_iteration_and_length(self) -> None:
        class Sample:
            b: int
            a: int

        analyzer = analyze(Sample)

        assert [prop.name for prop in analyzer] == ['a', 'b']
        assert len(analyzer) == 2
        assert all(isinstance(prop, PropertyDescriptor) for prop in analyzer)

    def test_get_properties_is_stable(self) -> None:
        class Sample:
            a: int

        analyzer = analyze(Sample)

        assert analyzer.get_properties() is analyzer.get_properties()

    def test_own_properties_is_read_only(self) -> None:
        class Sample:
            a: int

        with pytest.raises(TypeError):
            analyze(Sample).own_properties['b'] = None

    def test_repr(self) -> None:
        class Sample:
            a: int

        assert 'Sample' in repr(analyze(Sample))
        assert isinstance(analyze(Sample), TypeAnalyzer)
