"""Answer encoding, shape validation and the required-field gate."""

import pytest

from otassess_core.answers import (
    decode_checkbox,
    encode_checkbox,
    is_answered,
    normalize_answer,
    validate_draft,
)
from otassess_core.errors import AnswerValidationError


@pytest.fixture
def q(store):
    return store.get_question_by_id


# =====================================================================
# Checkbox encoding
# =====================================================================


def test_encode_checkbox_is_sorted_and_deduplicated():
    assert encode_checkbox(["Horn", "Brake release", "Horn"]) == '["Brake release", "Horn"]'


def test_encode_empty_selection():
    assert encode_checkbox([]) == "[]"


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_decode_blank_is_empty_set(raw):
    assert decode_checkbox(raw) == set()


@pytest.mark.parametrize("raw", ["Horn", '{"a": 1}', "[1, 2]"])
def test_decode_rejects_malformed(raw):
    with pytest.raises(AnswerValidationError) as exc_info:
        decode_checkbox(raw)
    assert exc_info.value.field == "answer"


# =====================================================================
# normalize_answer
# =====================================================================


def test_checkbox_list_is_encoded(q):
    assert normalize_answer(q("scooter_op_1"), ["Horn", "Speed dial"]) == '["Horn", "Speed dial"]'


def test_checkbox_json_is_canonicalised(q):
    assert normalize_answer(q("scooter_op_1"), '["Speed dial", "Horn"]') == '["Horn", "Speed dial"]'


def test_checkbox_unknown_option_rejected(q):
    with pytest.raises(AnswerValidationError, match="Unknown option"):
        normalize_answer(q("scooter_op_1"), ["Cup holder"])


def test_list_for_single_value_question_rejected(q):
    with pytest.raises(AnswerValidationError):
        normalize_answer(q("scooter_user_2"), ["Yes"])


def test_yes_no(q):
    assert normalize_answer(q("scooter_user_2"), "No") == "No"
    with pytest.raises(AnswerValidationError):
        normalize_answer(q("scooter_user_2"), "Maybe")


def test_multiple_choice(q):
    assert normalize_answer(q("scooter_user_1"), "Independent") == "Independent"
    with pytest.raises(AnswerValidationError):
        normalize_answer(q("scooter_user_1"), "Sort of")


def test_rating_range(q):
    rating = q("scooter_user_3")
    assert normalize_answer(rating, " 4") == "4"
    with pytest.raises(AnswerValidationError, match="between 1 and 5"):
        normalize_answer(rating, "9")
    with pytest.raises(AnswerValidationError, match="whole number"):
        normalize_answer(rating, "three")


def test_text_passes_through(q):
    assert normalize_answer(q("scooter_comm_2"), "Flat footpath to shops") == "Flat footpath to shops"


def test_blank_answer_returned_as_is(q):
    assert normalize_answer(q("scooter_user_2"), None) is None
    assert normalize_answer(q("scooter_user_2"), "") == ""


# =====================================================================
# Required gate
# =====================================================================


def test_required_checkbox_needs_a_selection(q):
    with pytest.raises(AnswerValidationError, match="Select at least one option"):
        validate_draft(q("scooter_op_1"), [])


def test_required_single_value_needs_an_answer(q):
    with pytest.raises(AnswerValidationError, match="An answer is required"):
        validate_draft(q("scooter_user_4"), "  ")


def test_optional_question_may_be_blank(q):
    assert validate_draft(q("scooter_user_3"), None) is None


def test_is_answered(q):
    assert is_answered(q("scooter_op_1"), '["Horn"]')
    assert not is_answered(q("scooter_op_1"), "[]")
    assert not is_answered(q("scooter_user_2"), None)
    assert is_answered(q("scooter_user_2"), "Yes")
