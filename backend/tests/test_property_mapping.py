"""
Library API — Property Mapping Unit Tests
===========================================

What:  Tests for PropertyMappingRegistry registration, lookup, and sort
       expression validation/resolution.
How:   Pure in-memory tests; no database.
"""

import pytest

from app.exceptions import ConfigurationError, ValidationError
from app.models.author import Author
from app.schemas.author import AuthorDto
from app.services.property_mapping import (
    PropertyMapping,
    PropertyMappingRegistry,
    PropertyMappingValue,
    SortInstruction,
    build_property_mapping_registry,
    property_mapping_registry,
)


class Source:
    pass


class Destination:
    pass


def _mapping(source=Source, destination=Destination):
    return PropertyMapping(source, destination, {"Title": PropertyMappingValue(("title",))})


class TestRegistration:

    def setup_method(self):
        self.registry = PropertyMappingRegistry()

    def test_register_then_get(self):
        mapping = _mapping()
        self.registry.register(Source, Destination, mapping)
        assert self.registry.get_mapping(Source, Destination) is mapping

    def test_duplicate_pair_rejected(self):
        self.registry.register(Source, Destination, _mapping())
        with pytest.raises(ConfigurationError, match="already registered"):
            self.registry.register(Source, Destination, _mapping())

    def test_missing_pair_raises(self):
        with pytest.raises(ConfigurationError, match="Cannot find exact property mapping"):
            self.registry.get_mapping(Source, Destination)

    def test_reversed_pair_is_a_different_pair(self):
        self.registry.register(Source, Destination, _mapping())
        with pytest.raises(ConfigurationError):
            self.registry.get_mapping(Destination, Source)

    def test_mapping_for_other_pair_rejected(self):
        with pytest.raises(ConfigurationError):
            self.registry.register(Destination, Source, _mapping())

    def test_frozen_registry_rejects_registration(self):
        self.registry.freeze()
        assert self.registry.frozen
        with pytest.raises(ConfigurationError, match="after startup"):
            self.registry.register(Source, Destination, _mapping())

    def test_empty_destination_fields_rejected(self):
        with pytest.raises(ConfigurationError):
            PropertyMappingValue(())

    def test_keys_declared_twice_rejected(self):
        with pytest.raises(ConfigurationError, match="declared twice"):
            PropertyMapping(
                Source,
                Destination,
                {"Title": PropertyMappingValue(("title",)), "title": PropertyMappingValue(("name",))},
            )

    def test_build_registers_extra_mappings_and_freezes(self):
        registry = build_property_mapping_registry(extra=[_mapping()])
        assert registry.frozen
        assert "Title" in registry.get_mapping(Source, Destination)
        assert "Name" in registry.get_mapping(AuthorDto, Author)


class TestAuthorMapping:

    def setup_method(self):
        self.mapping = property_mapping_registry.get_mapping(AuthorDto, Author)

    def test_keys_in_declaration_order(self):
        assert self.mapping.keys() == ["Id", "Genre", "Age", "Name"]

    def test_lookup_is_case_insensitive(self):
        assert self.mapping.get("nAmE").destination_fields == ("first_name", "last_name")
        assert " age " in self.mapping

    def test_age_reverts_date_of_birth(self):
        value = self.mapping.get("Age")
        assert value.destination_fields == ("date_of_birth",)
        assert value.revert is True


class TestSortValidation:

    def setup_method(self):
        self.registry = property_mapping_registry

    @pytest.mark.parametrize(
        "expression",
        [None, "", "  ", "Name", "name desc", "Genre, Age", "age asc, name DESC", "name,,genre"],
    )
    def test_valid_expressions(self, expression):
        assert self.registry.is_valid_sort_expression(AuthorDto, Author, expression)

    @pytest.mark.parametrize(
        "expression",
        ["Nickname", "name, nickname", "name sideways", "name desc extra", "date_of_birth"],
    )
    def test_invalid_expressions(self, expression):
        assert not self.registry.is_valid_sort_expression(AuthorDto, Author, expression)

    def test_validation_needs_a_mapping(self):
        with pytest.raises(ConfigurationError):
            self.registry.is_valid_sort_expression(Source, Destination, "Title")


class TestSortResolution:

    def setup_method(self):
        self.registry = property_mapping_registry

    def test_name_expands_to_two_fields(self):
        instructions = self.registry.resolve_sort_expression(AuthorDto, Author, "Name")
        assert instructions == [
            SortInstruction("first_name", descending=False),
            SortInstruction("last_name", descending=False),
        ]

    def test_age_desc_is_date_of_birth_ascending(self):
        (instruction,) = self.registry.resolve_sort_expression(AuthorDto, Author, "age desc")
        assert instruction.field == "date_of_birth"
        assert instruction.descending is True
        assert instruction.effective_descending is False

    def test_age_asc_is_date_of_birth_descending(self):
        (instruction,) = self.registry.resolve_sort_expression(AuthorDto, Author, "Age")
        assert instruction.effective_descending is True

    def test_clause_order_is_preserved(self):
        instructions = self.registry.resolve_sort_expression(AuthorDto, Author, "genre desc, name")
        assert [i.field for i in instructions] == ["genre", "first_name", "last_name"]
        assert [i.effective_descending for i in instructions] == [True, False, False]

    def test_empty_expression_resolves_to_nothing(self):
        assert self.registry.resolve_sort_expression(AuthorDto, Author, "") == []

    def test_unknown_key_raises(self):
        with pytest.raises(ValidationError, match="Key mapping for 'Nickname' is missing"):
            self.registry.resolve_sort_expression(AuthorDto, Author, "Nickname")

    def test_malformed_clause_raises(self):
        with pytest.raises(ValidationError, match="Malformed"):
            self.registry.resolve_sort_expression(AuthorDto, Author, "name up")
