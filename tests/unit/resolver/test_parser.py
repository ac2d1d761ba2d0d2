"""Tests for the response parser in textanchor.resolver.parser.

Covers:
- Structured, category-keyed and bare-string records
- Category mappings and custom suffixes
- Attribute flattening
- Record defects turned into warnings
- Fatal top-level structure errors
"""

import json
import logging
from typing import Any

import pytest

from textanchor.lib.errors import ParseError
from textanchor.models.config import FormatType, ResolverConfig
from textanchor.models.records import WarningReason
from textanchor.resolver.parser import ResponseParser, flatten_attributes


def _fence(content: Any) -> str:
    return f"```json\n{json.dumps(content, ensure_ascii=False)}\n```"


@pytest.fixture
def parser() -> ResponseParser:
    return ResponseParser()


@pytest.mark.unit
class TestRecordShapes:
    """Tests for the accepted record shapes."""

    def test_structured_records(self, parser: ResponseParser) -> None:
        """Test extraction_class/extraction_text records and the short keys."""
        response = _fence(
            {
                "extractions": [
                    {
                        "extraction_class": "person",
                        "extraction_text": "Alice",
                        "attributes": {"role": "host"},
                    },
                    {"class": "place", "text": "Paris"},
                ]
            }
        )
        parsed = parser.parse(response)

        assert [r.extraction_class for r in parsed.records] == ["person", "place"]
        assert [r.extraction_text for r in parsed.records] == ["Alice", "Paris"]
        assert parsed.records[0].attributes == {"role": "host"}
        assert [r.extraction_index for r in parsed.records] == [1, 2]
        assert parsed.warnings == []

    def test_category_keyed_records(self, parser: ResponseParser) -> None:
        """Test category-keyed records with attribute and index suffixes."""
        response = _fence(
            {
                "extractions": [
                    {
                        "person": "Alice",
                        "person_attributes": {"age": 30},
                        "person_index": 4,
                    },
                    {"location": "Paris"},
                ]
            }
        )
        parsed = parser.parse(response)

        assert len(parsed.records) == 2
        alice, paris = parsed.records
        assert (alice.extraction_class, alice.extraction_text) == ("person", "Alice")
        assert alice.attributes == {"age": "30"}
        assert alice.extraction_index == 4
        assert (paris.extraction_class, paris.extraction_index) == ("location", 2)

    def test_multiple_categories_in_one_item(self, parser: ResponseParser) -> None:
        """Test each category key of one item becomes its own record, in order."""
        parsed = parser.parse(
            _fence({"extractions": [{"person": "Alice", "place": "Paris"}]})
        )
        assert [r.extraction_class for r in parsed.records] == ["person", "place"]

    def test_bare_strings_use_default_class(self, parser: ResponseParser) -> None:
        """Test bare strings get the default extraction class."""
        parsed = parser.parse(_fence(["Alice", "Bob"]))
        assert [(r.extraction_class, r.extraction_text) for r in parsed.records] == [
            ("text", "Alice"),
            ("text", "Bob"),
        ]

    def test_bare_strings_without_default_class(self) -> None:
        """Test bare strings are dropped when no default class is configured."""
        parser = ResponseParser(ResolverConfig(default_extraction_class=None))
        parsed = parser.parse(_fence({"extractions": ["Alice", "Bob"]}))

        assert parsed.records == []
        assert [w.reason for w in parsed.warnings] == [WarningReason.MISSING_CLASS] * 2

    def test_numeric_text_is_stringified(self, parser: ResponseParser) -> None:
        """Test numeric extraction text becomes a string."""
        parsed = parser.parse(_fence({"extractions": [{"year": 1917}]}))
        assert parsed.records[0].extraction_text == "1917"

    def test_custom_suffixes(self) -> None:
        """Test configured suffixes are used to find attributes and indices."""
        parser = ResponseParser(
            ResolverConfig(attribute_suffix="_attrs", index_suffix="_pos")
        )
        parsed = parser.parse(
            _fence({"extractions": [{"person": "A", "person_attrs": {"x": 1}, "person_pos": 7}]})
        )

        assert len(parsed.records) == 1
        assert parsed.records[0].attributes == {"x": "1"}
        assert parsed.records[0].extraction_index == 7

    def test_empty_extractions(self, parser: ResponseParser) -> None:
        """Test an empty or null extractions list yields no records."""
        assert parser.parse(_fence({"extractions": []})).records == []
        assert parser.parse(_fence({"extractions": None})).records == []


@pytest.mark.unit
class TestCategoryMapping:
    """Tests for top-level category mappings."""

    def test_yaml_category_mapping(self) -> None:
        """Test lists and scalars under category keys, with Chinese text."""
        parser = ResponseParser(ResolverConfig(format=FormatType.YAML))
        response = "```yaml\ncharacters:\n  - 宝玉\n  - 袭人\nlocations: 怡红院\n```"
        parsed = parser.parse(response)

        assert [(r.extraction_class, r.extraction_text) for r in parsed.records] == [
            ("characters", "宝玉"),
            ("characters", "袭人"),
            ("locations", "怡红院"),
        ]

    def test_mapping_items_take_category_as_class(
        self, parser: ResponseParser
    ) -> None:
        """Test mapping items under a category inherit the category as class."""
        parsed = parser.parse(
            _fence({"people": [{"text": "Alice", "attributes": {"role": "host"}}]})
        )
        record = parsed.records[0]
        assert record.extraction_class == "people"
        assert record.attributes == {"role": "host"}

    def test_mapping_item_without_text(self, parser: ResponseParser) -> None:
        """Test a mapping item without a text field is an invalid record."""
        parsed = parser.parse(_fence({"people": [{"name": "Alice"}]}))
        assert parsed.records == []
        assert parsed.warnings[0].reason == WarningReason.INVALID_RECORD


@pytest.mark.unit
class TestRecordDefects:
    """Tests for records dropped with warnings."""

    @pytest.mark.parametrize(
        ("item", "reason"),
        [
            ({"extraction_class": "person"}, WarningReason.MISSING_TEXT),
            ({"extraction_class": "person", "extraction_text": ""}, WarningReason.MISSING_TEXT),
            ({"extraction_class": "person", "extraction_text": None}, WarningReason.MISSING_TEXT),
            ({"extraction_text": "Alice"}, WarningReason.MISSING_CLASS),
            ({"person": {"name": "Alice"}}, WarningReason.INVALID_TEXT),
            ({"person": "Alice", "person_attributes": "host"}, WarningReason.INVALID_ATTRIBUTES),
            ({"person": "Alice", "person_attributes": {"text": "x"}}, WarningReason.RESERVED_ATTRIBUTE_KEY),
            ({"class": "p", "text": "A", "attributes": {"interval": [0, 1]}}, WarningReason.RESERVED_ATTRIBUTE_KEY),
            ({"person": "Alice", "person_index": "first"}, WarningReason.INVALID_INDEX),
            ({"person": "Alice", "person_index": True}, WarningReason.INVALID_INDEX),
            ({"person_index": 1}, WarningReason.INVALID_RECORD),
            (["Alice"], WarningReason.INVALID_RECORD),
        ],
    )
    def test_defect_reason(
        self, parser: ResponseParser, item: Any, reason: WarningReason
    ) -> None:
        """Test each defect is reported with its reason code."""
        parsed = parser.parse(_fence({"extractions": [item]}))
        assert parsed.records == []
        assert len(parsed.warnings) == 1
        assert parsed.warnings[0].reason == reason

    def test_warning_carries_raw_text(self, parser: ResponseParser) -> None:
        """Test the warning carries the offending record as JSON text."""
        parsed = parser.parse(_fence({"extractions": [{"extraction_class": "person"}]}))
        assert json.loads(parsed.warnings[0].raw_text) == {"extraction_class": "person"}

    def test_valid_records_survive_defects(self, parser: ResponseParser) -> None:
        """Test records around a defective one are kept in order."""
        parsed = parser.parse(
            _fence(
                {
                    "extractions": [
                        {"person": "Alice"},
                        {"person": "Bob", "person_attributes": "oops"},
                        {"person": "Carol"},
                    ]
                }
            )
        )
        assert [r.extraction_text for r in parsed.records] == ["Alice", "Carol"]
        assert len(parsed.warnings) == 1

    def test_defect_is_logged(
        self, parser: ResponseParser, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test dropped records are logged at WARNING."""
        with caplog.at_level(logging.WARNING, logger="textanchor.resolver.parser"):
            parser.parse(_fence({"extractions": [{"extraction_class": "person"}]}))
        assert "Dropping extraction record (missing_text)" in caplog.text


@pytest.mark.unit
class TestFatalStructure:
    """Tests for unusable top-level structure."""

    def test_extractions_not_a_sequence(self, parser: ResponseParser) -> None:
        """Test a non-sequence extractions value raises ParseError."""
        with pytest.raises(ParseError, match="must be a sequence"):
            parser.parse(_fence({"extractions": "Alice"}))

    def test_no_structured_block(self, parser: ResponseParser) -> None:
        """Test a response without a structured block raises ParseError."""
        with pytest.raises(ParseError):
            parser.parse("I could not find any entities.")


@pytest.mark.unit
class TestFlattenAttributes:
    """Tests for attribute flattening."""

    def test_flattens_nested_values(self) -> None:
        """Test nested mappings, lists, booleans and nulls become strings."""
        result = flatten_attributes(
            {"a": {"b": 1}, "tags": ["x", "y"], "flag": True, "none": None}
        )
        assert result == {"a.b": "1", "tags": "x, y", "flag": "true", "none": ""}

    def test_null_list_items_skipped(self) -> None:
        """Test null items in a list leave no dangling separator."""
        result = flatten_attributes({"k": [{"z": 1}, None], "aka": [None, "A", None]})
        assert result == {"k": '{"z": 1}', "aka": "A"}

    def test_preserves_key_order(self) -> None:
        """Test attribute order follows the response."""
        result = flatten_attributes({"z": 1, "a": 2, "m": 3})
        assert list(result) == ["z", "a", "m"]
