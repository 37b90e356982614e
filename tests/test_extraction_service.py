import json

import pytest

from collection_report.application.extraction_service import (
    VISION_PROMPT,
    PAYLOAD_KEYS,
    normalize_extraction,
    parse_vision_response,
    review_extraction,
)
from collection_report.domain.vocabulary import BranchVocabulary
from collection_report.errors import BranchRequiredError, ExtractionPayloadError


@pytest.fixture
def vocabulary():
    return BranchVocabulary.default()


def _response(payload):
    return "Here is the data:\n```json\n" + json.dumps(payload) + "\n```"


def test_parse_vision_response_from_fenced_text():
    payload = parse_vision_response(_response({"BRANCH": "Farok", "BILL": "12"}))
    assert payload == {"BRANCH": "Farok", "BILL": "12"}


def test_parse_vision_response_accepts_mapping():
    assert parse_vision_response({"BRANCH": "KALLAI"}) == {"BRANCH": "KALLAI"}


@pytest.mark.parametrize("text", ["no json here", "", '{"BRANCH": }', "[1, 2, 3]"])
def test_parse_vision_response_rejects_malformed(text):
    with pytest.raises(ExtractionPayloadError):
        parse_vision_response(text)


def test_malformed_payload_is_a_value_error():
    with pytest.raises(ValueError):
        parse_vision_response("nothing")


def test_normalize_extraction_coerces_loose_values():
    result = normalize_extraction(
        {
            "BRANCH": " Kallai ",
            "TOTAL RUNNING BALANCE": "1,20,000",
            "RUNNING BALANCE COLLN": 30000,
            "TOTAL ARRS": None,
            "ARREARS COLL": "n/a",
            "  total   coll ": "90.5",
        }
    )
    assert result.branch == "Kallai"
    assert result.total_rb == 120000.0
    assert result.rb_colln == 30000.0
    assert result.total_arr is None
    assert result.arr_colln is None
    assert result.total_colln == 90.5
    assert result.bill is None


def test_normalize_extraction_without_branch():
    assert normalize_extraction({"BILL": 4}).branch == ""


def test_review_suggests_branch_and_commits(vocabulary):
    review = review_extraction(
        _response({"BRANCH": "Farok", "TOTAL RUNNING BALANCE": "1000", "RUNNING BALANCE COLLN": "250", "BILL": None}),
        vocabulary,
    )
    assert review.suggested_branch == "FAROOK"
    assert not review.needs_branch
    draft = review.draft()
    assert draft["extracted_branch"] == "Farok"
    assert draft["branch"] == "FAROOK"
    assert draft["total_rb"] == "1000"
    assert draft["bill"] == ""

    row = review.commit()
    assert row.branch == "FAROOK"
    assert row.rb_colln == "250"


def test_review_user_choice_and_overrides(vocabulary):
    review = review_extraction({"BRANCH": "Farook", "BILL": "10"}, vocabulary)
    row = review.commit(branch="KALLAI", overrides={"bill": "12", "totalARR": 700})
    assert row.branch == "KALLAI"
    assert row.bill == "12"
    assert row.total_arr == "700"


def test_review_without_match_requires_manual_branch(vocabulary):
    review = review_extraction({"BRANCH": "XYZ123", "BILL": "9"}, vocabulary)
    assert review.suggested_branch is None
    assert review.needs_branch
    with pytest.raises(BranchRequiredError):
        review.commit()
    assert review.commit(branch="MUKKAM").bill == "9"


def test_prompt_lists_every_payload_key():
    assert '"BRANCH"' in VISION_PROMPT
    for key in PAYLOAD_KEYS:
        assert f'"{key}"' in VISION_PROMPT
