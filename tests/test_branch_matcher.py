import pytest

from collection_report.domain.branch_matcher import edit_distance, match_branch, similarity
from collection_report.domain.vocabulary import DEFAULT_BRANCHES, BranchVocabulary


@pytest.fixture
def vocabulary():
    return BranchVocabulary.default()


def test_exact_match_keeps_vocabulary_casing(vocabulary):
    assert match_branch("FAROOK", vocabulary) == "FAROOK"
    assert match_branch("  farook ", vocabulary) == "FAROOK"


def test_containment_match_either_direction(vocabulary):
    assert match_branch("farook branch", vocabulary) == "FAROOK"
    assert match_branch("medical", vocabulary) == "MEDICAL COLLEGE"


def test_containment_prefers_first_vocabulary_entry():
    assert match_branch("road", ["NORTH ROAD", "SOUTH ROAD"]) == "NORTH ROAD"


def test_exact_match_beats_containment():
    assert match_branch("road", ["NORTH ROAD", "ROAD"]) == "ROAD"


def test_similarity_match(vocabulary):
    assert match_branch("FAROK", vocabulary) == "FAROOK"
    assert match_branch("mukam", vocabulary) == "MUKKAM"


def test_similarity_score():
    assert similarity("FAROK", "FAROOK") == pytest.approx(5 / 6)
    assert similarity("farook", "FAROOK") == 1.0
    assert edit_distance("KITTEN", "SITTING") == 3


def test_similarity_threshold_is_strict():
    assert similarity("ABCXY", "ABCDE") == pytest.approx(0.6)
    assert match_branch("ABCXY", ["ABCDE"]) is None
    assert match_branch("ABCDX", ["ABCDE"]) == "ABCDE"


def test_similarity_tie_keeps_first_seen():
    assert match_branch("ABCX", ["ABCD", "ABCE"]) == "ABCD"


def test_best_similarity_wins():
    assert match_branch("KALLAIX", ["KALIX", "KALLAIZ"]) == "KALLAIZ"


@pytest.mark.parametrize("extracted", ["XYZ123", "QQQQQQQQ"])
def test_no_match_returns_none(vocabulary, extracted):
    assert match_branch(extracted, vocabulary) is None


@pytest.mark.parametrize("extracted", ["", None, "   "])
def test_empty_input_returns_none(vocabulary, extracted):
    assert match_branch(extracted, vocabulary) is None


def test_plain_sequence_vocabulary():
    assert match_branch("kallai", list(DEFAULT_BRANCHES)) == "KALLAI"


def test_repeated_calls_are_independent(vocabulary):
    first = [match_branch(name, vocabulary) for name in ("FAROK", "XYZ123", "kallai")]
    second = [match_branch(name, vocabulary) for name in ("FAROK", "XYZ123", "kallai")]
    assert first == second == ["FAROOK", None, "KALLAI"]


def test_vocabulary_rejects_empty_and_duplicates():
    with pytest.raises(ValueError):
        BranchVocabulary([])
    with pytest.raises(ValueError):
        BranchVocabulary(["Farook", "FAROOK"])
    with pytest.raises(ValueError):
        BranchVocabulary(["FAROOK", "  "])


def test_vocabulary_is_case_insensitive_and_ordered():
    vocabulary = BranchVocabulary(["Kallai", "Farook"])
    assert list(vocabulary) == ["Kallai", "Farook"]
    assert "KALLAI" in vocabulary
    assert vocabulary.canonical(" farook ") == "Farook"
    assert vocabulary.canonical("unknown") is None
    assert len(BranchVocabulary.default()) == 13
