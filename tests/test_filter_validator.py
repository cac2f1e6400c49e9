"""Tests for structural filter validation."""
import pytest

from resource_query.config.settings import Settings
from resource_query.core.exceptions import GrammarError
from resource_query.search.operators import Operator
from resource_query.search.validators import count_operations, is_valid_field_name, validate_filter


class TestFieldNames:
    @pytest.mark.parametrize("name", ["name", "created_at", "_private", "field2"])
    def test_valid(self, name):
        assert is_valid_field_name(name)

    @pytest.mark.parametrize("name", ["id; DROP TABLE users", "2field", "a-b", "users.name", "", 42])
    def test_invalid(self, name):
        assert not is_valid_field_name(name)


class TestValidateFilter:
    def test_valid_filter_coerces_values(self, settings):
        conditions = validate_filter(
            {"role": {"inArray": "admin,user"}, "age": {"gte": "18"}, "is_active": {"eq": "true"}},
            settings,
        )

        by_field = {c.field: c for c in conditions}
        assert by_field["role"].operator is Operator.IN
        assert by_field["role"].value == ["admin", "user"]
        assert by_field["age"].value == 18
        assert by_field["is_active"].value is True

    def test_raw_value_is_kept(self, settings):
        (condition,) = validate_filter({"mobile_no": {"eq": "007"}}, settings)

        assert condition.value == 7
        assert condition.raw == "007"

    def test_in_and_in_array_are_the_same_operator(self, settings):
        conditions = validate_filter({"role": {"in": "a,b", "inArray": "c"}}, settings)

        assert [c.operator for c in conditions] == [Operator.IN, Operator.IN]
        assert [c.wire_name for c in conditions] == ["in", "inArray"]

    def test_none_and_empty(self, settings):
        assert validate_filter(None, settings) == []
        assert validate_filter({}, settings) == []

    def test_not_a_mapping(self, settings):
        with pytest.raises(GrammarError):
            validate_filter(["role"], settings)

    def test_injection_in_field_name_rejected(self, settings):
        with pytest.raises(GrammarError) as exc_info:
            validate_filter({"id; DROP TABLE users": {"eq": "1"}}, settings)

        assert exc_info.value.code == "QRY_GRAMMAR"
        assert "id; DROP TABLE users" in exc_info.value.details["fields"]

    def test_field_name_too_long(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"a" * 51: {"eq": "1"}}, settings)

    def test_unknown_operator(self, settings):
        with pytest.raises(GrammarError) as exc_info:
            validate_filter({"name": {"like": "x"}}, settings)

        assert exc_info.value.details["errors"][0]["operator"] == "like"

    def test_operations_must_be_mapping(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"name": "alice"}, settings)

    def test_operation_ceiling(self, settings):
        raw = {f"field_{i}": {"eq": str(i)} for i in range(settings.max_filter_operations + 1)}
        assert count_operations(raw) == 11

        with pytest.raises(GrammarError) as exc_info:
            validate_filter(raw, settings)

        assert "Too many filter operations" in exc_info.value.message

    def test_operation_ceiling_is_configurable(self):
        settings = Settings(_env_file=None, max_filter_operations=2)

        with pytest.raises(GrammarError):
            validate_filter({"a": {"gt": "1", "lt": "5"}, "b": {"eq": "x"}}, settings)

    def test_ceiling_counts_operations_not_fields(self, settings):
        raw = {"age": {"gt": "1", "lt": "5", "ne": "3"}}

        assert len(validate_filter(raw, settings)) == 3

    def test_string_too_long(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"name": {"eq": "x" * 256}}, settings)

    def test_array_too_long(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"id": {"inArray": [str(i) for i in range(101)]}}, settings)

    def test_nested_value_rejected(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"name": {"eq": {"nested": "x"}}}, settings)

    def test_all_problems_reported_together(self, settings):
        with pytest.raises(GrammarError) as exc_info:
            validate_filter(
                {"bad field": {"eq": "1"}, "name": {"like": "x"}, "age": {"eq": "3"}},
                settings,
            )

        error = exc_info.value
        assert error.details["fields"] == ["bad field", "name"]
        assert "bad field" in error.message
        assert "name" in error.message
        assert len(error.details["errors"]) == 2


class TestLongDigitStrings:
    """Digit strings are length-checked as text before they become numbers."""

    @pytest.mark.parametrize("digits", [300, 5000])
    def test_long_number_rejected(self, settings, digits):
        with pytest.raises(GrammarError) as exc_info:
            validate_filter({"name": {"eq": "1" * digits}}, settings)

        assert exc_info.value.details["fields"] == ["name"]
        assert "longer than 255" in exc_info.value.details["errors"][0]["message"]

    def test_long_number_in_list_rejected(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"age": {"inArray": ["1", "9" * 5000]}}, settings)

    def test_long_segment_in_comma_list_rejected(self, settings):
        with pytest.raises(GrammarError):
            validate_filter({"age": {"inArray": "1," + "9" * 300}}, settings)

    def test_long_comma_list_of_short_values_accepted(self, settings):
        raw = ",".join(str(10_000 + i) for i in range(100))
        assert len(raw) > settings.max_filter_string_length

        (condition,) = validate_filter({"age": {"inArray": raw}}, settings)

        assert len(condition.value) == 100

    def test_number_at_the_limit_is_coerced(self, settings):
        (condition,) = validate_filter({"age": {"eq": "1" * 255}}, settings)

        assert condition.value == int("1" * 255)
