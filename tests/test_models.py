"""Tests for hint records, draft validation and display helpers."""
import pytest

from conftest import make_row
from geometa.hints import Hint, HintDraft, HintValidationError, format_meta_type, validate_draft


def _draft(**overrides):
    data = {
        "country": "Kenya",
        "meta_type": "utility_poles",
        "description": "Wooden poles with a single crossbar",
    }
    data.update(overrides)
    return data


def test_hint_round_trips_through_dict():
    row = make_row("h1", image_url="https://example.com/a.png")

    hint = Hint.from_dict(row)

    assert hint.to_dict() == row


def test_hint_blank_image_url_becomes_none():
    hint = Hint.from_dict(make_row("h1", image_url=""))

    assert hint.image_url is None


def test_hint_ids_are_strings():
    hint = Hint.from_dict(make_row(42))

    assert hint.id == "42"


def test_draft_strips_labels_and_drops_blank_optional_fields():
    draft = validate_draft(_draft(country="  Kenya ", continent="  ", image_url=""))

    assert draft.country == "Kenya"
    assert draft.continent is None
    assert draft.image_url is None
    assert draft.to_row() == {
        "country": "Kenya",
        "meta_type": "utility_poles",
        "description": "Wooden poles with a single crossbar",
    }


def test_draft_accepts_new_meta_types():
    draft = validate_draft(_draft(meta_type="brand_new_category"))

    assert draft.meta_type == "brand_new_category"


def test_draft_passes_through_existing_instance():
    draft = HintDraft(**_draft())

    assert validate_draft(draft) is draft


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"description": "too short"}, "description"),
        ({"description": "   short    "}, "description"),
        ({"country": ""}, "country"),
        ({"meta_type": "   "}, "meta_type"),
        ({"image_url": "/relative/path.png"}, "image_url"),
        ({"image_url": "ftp://example.com/a.png"}, "image_url"),
    ],
)
def test_draft_rejects_invalid_fields(overrides, field):
    with pytest.raises(HintValidationError) as excinfo:
        validate_draft(_draft(**overrides))

    assert any(problem.startswith(field) for problem in excinfo.value.problems)


def test_draft_missing_fields_are_reported():
    with pytest.raises(HintValidationError) as excinfo:
        validate_draft({})

    fields = {problem.split(":")[0] for problem in excinfo.value.problems}
    assert {"country", "meta_type", "description"} <= fields


def test_ten_character_description_is_enough():
    draft = validate_draft(_draft(description="0123456789"))

    assert draft.description == "0123456789"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("bollard_types", "Bollard Types"),
        ("road lines", "Road Lines"),
        ("signs", "Signs"),
        ("", ""),
    ],
)
def test_format_meta_type(raw, expected):
    assert format_meta_type(raw) == expected
