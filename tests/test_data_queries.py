import pytest

from GP_researcher.analysis import data_queries as dq
from GP_researcher.analysis.constants import CHD, HYPERTENSION, OBESITY


def test_practices_by_postcode_exact(db, tables):
    single = dq.get_practices_by_postcode(db, tables, "NP11 5GX")
    assert single["practiceid"].to_list() == ["W001"]

    shared = dq.get_practices_by_postcode(db, tables, "SA1 1AA")
    assert shared["street"].to_list() == ["CASTLE SURGERY", "MARINA SURGERY"]

    assert dq.get_practices_by_postcode(db, tables, "NP11 9ZZ").is_empty()


def test_similar_practices_share_first_four_characters(db, tables):
    similar = dq.get_similar_practices(db, tables, "NP11 9ZZ")
    assert similar["street"].to_list() == ["HILL STREET SURGERY", "ST. LUKE'S SURGERY"]
    assert dq.get_similar_practices(db, tables, "LL11 1AA").is_empty()


def test_practice_lookup_by_id(db, tables):
    assert dq.practice_exists(db, tables, "W004")
    assert not dq.practice_exists(db, tables, "X999")

    details = dq.get_practice_by_id(db, tables, "W002")
    assert details.row(0, named=True) == {
        "practiceid": "W002",
        "street": "BARRY HEALTH CENTRE",
        "postcode": "CF62 8XX",
        "county": "South Glamorgan",
        "posttown": "BARRY",
    }


def test_practice_sizes(db, tables):
    sizes = dict(dq.get_practice_sizes(db, tables).iter_rows())
    assert sizes == {"W001": 5, "W002": 3, "W003": 1, "W004": 4, "W005": 2, "W006": 6}


def test_top_drugs_by_postcode(db, tables):
    drugs = dq.get_top_drugs_by_postcode(db, tables, "NP11 5GX")
    assert drugs.columns == ["bnfname", "total_items"]
    assert drugs.row(0) == ("Metformin HCl_Tab 500mg", 60)
    assert drugs["total_items"].to_list() == [60, 30, 10, 5]


def test_top_drugs_by_practice_breaks_ties_by_name(db, tables):
    drugs = dq.get_top_drugs_by_practice(db, tables, "W006")
    assert drugs["bnfname"].to_list()[:2] == ["Gliclazide_Tab 80mg", "Metformin HCl_Tab 500mg"]
    assert drugs["prescriptions"].to_list()[:2] == [2, 2]


def test_top_drug_categories(db, tables):
    categories = dq.get_top_drug_categories(db, tables, "W001")
    assert categories["sectiondesc"].to_list()[0] == "Drugs used in diabetes"
    assert categories.height == 2


def test_indicator_rates(db, tables):
    assert dq.get_practice_indicator_rate(db, tables, "W001", HYPERTENSION) == pytest.approx(15.0)
    assert dq.get_wales_indicator_rate(db, tables, HYPERTENSION) == pytest.approx(82 / 6)
    assert dq.get_group_indicator_rate(
        db, tables, HYPERTENSION, ["W001", "W004", "W006"]
    ) == pytest.approx(49 / 3)


def test_missing_indicator_rates_are_none(db, tables):
    assert dq.get_practice_indicator_rate(db, tables, "X999", HYPERTENSION) is None
    assert dq.get_group_indicator_rate(db, tables, HYPERTENSION, []) is None


def test_drug_items_by_name_prefix(db, tables):
    metformin = dq.get_drug_items_vs_indicator(
        db, tables, OBESITY, "obesity_rate", name_prefix="Metformin"
    )
    assert metformin.columns == ["practiceid", "total_drug_items", "obesity_rate"]
    assert metformin.height == 5
    assert metformin.row(0)[:2] == ("W006", 70)
    assert metformin.row(0)[2] == pytest.approx(13.0)


def test_drug_items_by_chemical_are_not_multiplied(db, tables):
    gliclazide = dq.get_drug_items_vs_indicator(
        db, tables, HYPERTENSION, "hypertension_rate", bnf_chemical="0601021M0"
    )
    items = dict(zip(gliclazide["practiceid"], gliclazide["total_drug_items"], strict=True))
    assert items == {"W006": 25, "W004": 12, "W001": 10}


def test_drug_items_needs_exactly_one_selector(db, tables):
    with pytest.raises(ValueError):
        dq.get_drug_items_vs_indicator(db, tables, OBESITY, "obesity_rate")
    with pytest.raises(ValueError):
        dq.get_drug_items_vs_indicator(
            db, tables, OBESITY, "obesity_rate", bnf_chemical="0601021M0", name_prefix="Glic"
        )


def test_diabetic_drugs_exclude_combinations_and_tests(db, tables):
    drugs = dq.get_diabetic_drugs(db, tables)
    assert drugs["chemicaldesc"].to_list() == ["Gliclazide", "Metformin hydrochloride"]


def test_chd_centiles(db, tables):
    centiles = dq.get_chd_centiles_with_address(db, tables)
    assert centiles.height == 6
    assert set(centiles.columns) == {"practiceid", "county", "postcode", "posttown", "centile"}
    assert dq.get_practice_centile(db, tables, "W001", CHD) == pytest.approx(0.8)
    assert dq.get_practice_centile(db, tables, "X999") is None


def test_beta_blockers_by_spend(db, tables):
    top = dq.get_beta_blockers_by_spend(db, tables, descending=True)
    assert top["bnfname"].to_list() == ["Bisoprolol Fumar_Tab 5mg", "Propranolol HCl_Tab 10mg"]
    assert top["total_spend"].to_list() == pytest.approx([222.0, 95.0])

    bottom = dq.get_beta_blockers_by_spend(db, tables, descending=False, limit=1)
    assert bottom.row(0)[0] == "Propranolol HCl_Tab 10mg"


def test_beta_blocker_spend_vs_centile(db, tables):
    spend = dq.get_beta_blocker_spend_vs_centile(db, tables).sort("practiceid")
    assert spend.height == 6
    first = spend.row(0, named=True)
    assert first["practiceid"] == "W001"
    assert first["total_spend_on_beta_blockers"] == pytest.approx(85.0)
    assert first["performance_centile"] == pytest.approx(0.8)


def test_spend_per_item_extremes(db, tables):
    highest = dq.get_spend_per_item_extreme(db, tables, "bisoprolol", highest=True)
    assert highest.row(0, named=True)["practiceid"] == "W002"
    assert highest["average_spend_per_item"].item() == pytest.approx(4.0)

    lowest = dq.get_spend_per_item_extreme(db, tables, "Bisoprolol Fumar_Tab 5mg", highest=False)
    assert lowest["practiceid"].item() == "W004"
    assert lowest["average_spend_per_item"].item() == pytest.approx(1.5)

    assert dq.get_spend_per_item_extreme(db, tables, "atenolol").is_empty()


def test_cluster_features(db, tables):
    features = dq.get_cluster_features(db, tables)
    assert features["practiceid"].to_list() == ["W001", "W002", "W003", "W004", "W005", "W006"]
    first = features.row(0, named=True)
    assert first["total_spend_on_beta_blockers"] == pytest.approx(85.0)
    assert first["total_quantity_of_chd_medication"] == pytest.approx(350.0)
    assert first["number_of_chd_related_prescriptions"] == 35
    assert first["performance_centile"] == pytest.approx(0.8)


def test_practice_names(db, tables):
    names = dq.get_practice_names(db, tables)
    assert names.height == 6
    assert dict(names.iter_rows())["W005"] == "MARINA SURGERY"
