"""
Test binding of host values to template lookups.
"""

from types import SimpleNamespace

import pytest

from liquidview import (
    MISSING,
    CollectionLookup,
    Drop,
    ExplicitLookup,
    ReflectiveLookup,
    ViewBag,
    bind,
    create_template_context,
)


class Product(Drop):
    def __init__(self, title, price):
        self.Title = title
        self._cost = price * 0.5
        self.price = price

    @property
    def Label(self):
        return f"{self.Title} ({self.price})"

    def discounted(self):
        return self.price - 1

    def with_tax(self, rate):
        return self.price * rate


class Catalogue(Drop):
    def __init__(self, items):
        self.items = items

    def before_method(self, name):
        if name == "anything":
            return "fallback"
        return MISSING

    def __iter__(self):
        return iter(self.items)


def test_bind_leaves_scalars_alone():
    """Test scalars and None pass through unchanged."""
    for value in (None, "text", 3, 2.5, True):
        assert bind(value) is value


def test_bind_dispatch():
    """Test each value kind binds to its lookup variant."""
    assert isinstance(bind(Product("a", 1)), ExplicitLookup)
    assert isinstance(bind({"a": 1}), ReflectiveLookup)
    assert isinstance(bind(SimpleNamespace(a=1)), ReflectiveLookup)
    assert isinstance(bind([1, 2]), CollectionLookup)
    assert isinstance(bind((1, 2)), CollectionLookup)
    assert isinstance(bind(x for x in range(3)), CollectionLookup)


def test_bind_is_idempotent():
    """Test binding an already-bound value returns it unchanged."""
    bound = bind({"a": 1})
    assert bind(bound) is bound


def test_bind_leaves_callables_alone():
    """Test functions and classes are not wrapped."""
    assert bind(len) is len
    assert bind(Product) is Product


def test_reflective_lookup_mapping():
    """Test mapping keys are looked up verbatim."""
    lookup = bind({"Name": "x"})

    assert lookup.lookup("Name") == "x"
    assert lookup.lookup("name") is MISSING
    assert "Name" in lookup


def test_reflective_lookup_object():
    """Test public data attributes are exposed, methods and privates are not."""
    class Person:
        species = "human"

        def __init__(self):
            self.FirstName = "Ada"
            self._secret = "hidden"

        def greet(self):
            return "hi"

    lookup = bind(Person())

    assert lookup.lookup("FirstName") == "Ada"
    assert lookup.lookup("species") == "human"
    assert lookup.lookup("_secret") is MISSING
    assert lookup.lookup("greet") is MISSING
    assert lookup.lookup("missing") is MISSING


def test_reflective_lookup_iterates_mapping_keys():
    """Test mappings iterate their keys."""
    lookup = bind({"a": 1, "b": 2})

    assert list(lookup) == ["a", "b"]
    assert len(lookup) == 2


def test_reflective_lookup_object_is_not_iterable():
    """Test plain objects refuse iteration."""
    with pytest.raises(TypeError):
        iter(bind(SimpleNamespace(a=1)))


def test_drop_exposes_attributes_properties_and_methods():
    """Test drop exposure rules."""
    product = Product("Lamp", 10)

    assert product.invoke_drop("Title") == "Lamp"
    assert product.invoke_drop("Label") == "Lamp (10)"
    assert product.invoke_drop("discounted") == 9
    assert product.invoke_drop("with_tax") is MISSING
    assert product.invoke_drop("_cost") is MISSING
    assert product.invoke_drop("invoke_drop") is MISSING
    assert product.invoke_drop("to_liquid") is MISSING
    assert product.invoke_drop("nope") is MISSING


def test_drop_contains():
    """Test membership reflects exposure."""
    product = Product("Lamp", 10)

    assert "Title" in product
    assert "nope" not in product


def test_drop_before_method_fallback():
    """Test unknown names go through before_method."""
    catalogue = Catalogue([])

    assert catalogue.invoke_drop("anything") == "fallback"
    assert catalogue.invoke_drop("other") is MISSING


def test_drop_class_attribute_default():
    """Test class-level defaults on drops are exposed."""
    class Settings(Drop):
        Theme = "dark"

    assert bind(Settings()).lookup("Theme") == "dark"


def test_iterable_drop_yields_bound_items():
    """Test iterating a drop binds every element."""
    catalogue = bind(Catalogue([Product("a", 1), {"k": "v"}]))

    items = list(catalogue)

    assert isinstance(items[0], ExplicitLookup)
    assert isinstance(items[1], ReflectiveLookup)


def test_to_liquid_replacement():
    """Test a drop may hand a different value to the template."""
    class Money(Drop):
        def to_liquid(self):
            return "$5.00"

    assert bind(Money()) == "$5.00"


def test_collection_lookup_names():
    """Test size/first/last and indexes on collections."""
    items = bind(["a", "b", "c"])

    assert items.lookup("size") == 3
    assert items.lookup("first") == "a"
    assert items.lookup("last") == "c"
    assert items.lookup(1) == "b"
    assert items.lookup(5) is MISSING
    assert items.lookup("other") is MISSING


def test_empty_collection():
    """Test empty collections are falsy and have no first/last."""
    items = bind([])

    assert not items
    assert items.lookup("first") is MISSING
    assert items.lookup("last") is MISSING


def test_collection_captures_generators_once():
    """Test one-shot iterables can be iterated repeatedly once bound."""
    items = bind(x * 2 for x in range(3))

    assert list(items) == [0, 2, 4]
    assert list(items) == [0, 2, 4]
    assert len(items) == 3


def test_collection_iteration_binds_elements():
    """Test each element is bound with the same rules."""
    items = list(bind([{"Name": "x"}, None, 3]))

    assert isinstance(items[0], ReflectiveLookup)
    assert items[1] is None
    assert items[2] == 3


def test_collection_sequence_protocol_binds_elements():
    """Test indexing, slicing and reversal return bound values."""
    items = bind([{"Name": "x"}, "b", {"Name": "z"}])

    assert isinstance(items[0], ReflectiveLookup)
    assert items[1] == "b"
    assert isinstance(items[1:], CollectionLookup)
    assert list(items[1:])[0] == "b"
    assert [item.lookup("Name") for item in (items[-1], next(reversed(items)))] == ["z", "z"]

    with pytest.raises(IndexError):
        items[5]


def test_lookup_equality_uses_host_value():
    """Test bound values compare equal to their host values."""
    assert bind({"a": 1}) == {"a": 1}
    assert bind([1, 2]) == bind([1, 2])


def test_create_template_context_roots():
    """Test the template context exposes Model and ViewBag."""
    bag = ViewBag(Name="test")

    context = create_template_context(None, bag)

    assert set(context) == {"Model", "ViewBag"}
    assert context["Model"] is None
    assert context["ViewBag"].lookup("Name") == "test"


def test_create_template_context_is_fresh():
    """Test every call builds a new context."""
    assert create_template_context() is not create_template_context()


def test_view_bag_attribute_and_item_access():
    """Test ViewBag dynamic access."""
    bag = ViewBag()
    bag.Title = "Home"
    bag["Count"] = 2

    assert bag["Title"] == "Home"
    assert bag.Count == 2
    assert bag.Missing is None
    assert "Missing" not in bag
    assert len(bag) == 2

    del bag.Title
    assert "Title" not in bag
