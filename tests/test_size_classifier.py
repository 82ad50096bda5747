import polars as pl
import pytest

from GP_researcher.analysis.size_classifier import SizeClassifier, SizeLabel


@pytest.fixture
def population():
    return pl.DataFrame(
        {
            "practiceid": ["W001", "W002", "W003", "W004", "W005", "W006"],
            "total_prescriptions": [5, 3, 1, 4, 2, 6],
        }
    )


def test_median_of_population(population):
    assert SizeClassifier(population).median == 3.5


def test_classify_against_median(population):
    classifier = SizeClassifier(population)
    assert classifier.classify("W001") is SizeLabel.BIG
    assert classifier.classify("W002") is SizeLabel.SMALL
    assert classifier.classify("W006") == "Big"


def test_count_equal_to_median_is_small():
    population = pl.DataFrame({"practiceid": ["A", "B", "C"], "total_prescriptions": [1, 2, 3]})
    classifier = SizeClassifier(population)
    assert classifier.classify("B") is SizeLabel.SMALL
    assert classifier.classify_count(2) is SizeLabel.SMALL
    assert classifier.classify_count(3) is SizeLabel.BIG


def test_unknown_practice_is_small(population):
    classifier = SizeClassifier(population)
    assert classifier.prescription_count("NOPE") == 0
    assert classifier.classify("NOPE") is SizeLabel.SMALL


def test_empty_population_labels_everything_small():
    empty = pl.DataFrame(
        {"practiceid": [], "total_prescriptions": []},
        schema={"practiceid": pl.Utf8, "total_prescriptions": pl.Int64},
    )
    classifier = SizeClassifier(empty)
    assert classifier.median is None
    assert classifier.classify_count(100) is SizeLabel.SMALL
    assert classifier.same_size_practices(SizeLabel.BIG) == []


def test_label_population_and_groups(population):
    classifier = SizeClassifier(population)
    labelled = classifier.label_population()
    assert labelled["size_category"].to_list() == ["Big", "Small", "Small", "Big", "Small", "Big"]
    assert classifier.same_size_practices(SizeLabel.BIG) == ["W001", "W004", "W006"]
    assert classifier.same_size_practices("Small") == ["W002", "W003", "W005"]


def test_median_is_cached_until_refresh(population):
    classifier = SizeClassifier(population)
    assert classifier.median == 3.5

    classifier.refresh(population.with_columns(pl.col("total_prescriptions") * 10))
    assert classifier.median == 35.0
    assert classifier.classify("W002") is SizeLabel.SMALL
