import pytest
from sillywalk.services import field_validator
from sillywalk.services.domain import Submission

from conftest import make_submission


def fields_of(violations):
    return {v.field for v in violations}


def test_valid_submission_has_no_violations():
    assert field_validator.validate(make_submission()) == []


def test_missing_fields_are_all_reported():
    empty = Submission(None, None, None, None, None, None)
    assert fields_of(field_validator.validate(empty)) == {
        "applicant_name", "walk_name", "description",
        "has_briefcase", "involves_hopping", "number_of_twirls",
    }


def test_blank_text_counts_as_missing():
    violations = field_validator.validate(make_submission(applicant_name="   "))
    assert [v.message for v in violations] == ["Applicant name is required"]


@pytest.mark.parametrize("field,value", [
    ("applicant_name", "J"),
    ("applicant_name", "J" * 101),
    ("walk_name", "Up"),
    ("walk_name", "W" * 51),
    ("description", "a" * 49),
    ("description", "  " + "a" * 49 + "  "),
    ("description", "a" * 1001),
])
def test_trimmed_length_bounds(field, value):
    assert fields_of(field_validator.validate(make_submission(**{field: value}))) == {field}


def test_description_of_exactly_fifty_characters_passes_length():
    assert field_validator.validate(make_submission(description="d" * 50)) == []


@pytest.mark.parametrize("twirls,ok", [(-1, False), (0, True), (100, True), (101, False)])
def test_twirl_bounds(twirls, ok):
    violations = field_validator.validate(make_submission(number_of_twirls=twirls))
    assert (violations == []) is ok


def test_messages_do_not_echo_input():
    violations = field_validator.validate(make_submission(walk_name="<b"))
    assert violations
    assert all("<b" not in v.message for v in violations)


def test_character_sets_pass_for_clean_submission():
    assert field_validator.validate_character_sets(make_submission()) is None


@pytest.mark.parametrize("overrides,subtype", [
    ({"applicant_name": "John Cleese 3rd"}, field_validator.INVALID_CHARACTERS),
    ({"walk_name": "Walk @ Dawn"}, field_validator.INVALID_CHARACTERS),
    ({"description": "A walk\x07 with a bell that rings at every single step of the way"},
     field_validator.CONTENT_SANITIZATION_REQUIRED),
])
def test_character_set_violations(overrides, subtype):
    assert field_validator.validate_character_sets(make_submission(**overrides)) == subtype
