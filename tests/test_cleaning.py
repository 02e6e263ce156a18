"""
Cleaning tests

Tests:
- Loading: header standardization, placeholders kept as text
- Column selection and taxon exclusion
- Unit conversion to cm / g, unknown unit policies
- Vocabulary mapping (idempotent, pass-through)
- Quality filter, coordinate lookup, mass ratio
- End-to-end cleaning of a small raw table
"""

import numpy as np
import pandas as pd
import pytest

from foodweb import config, lookups
from foodweb.cleaning import (
    CLEANING_STAGES,
    add_mass_ratio,
    clean_observations,
    coerce_numeric,
    convert_units,
    exclude_taxon,
    exclude_values,
    filter_quality,
    geocode_coordinates,
    load_raw_observations,
    load_summary_table,
    lookup_coordinate,
    normalize_missing,
    normalize_units,
    normalize_vocabulary,
    run_pipeline,
    select_columns,
    standardize_column_names,
    unmatched_values,
    write_clean_csv,
)
from tests.conftest import make_raw


class TestLoading:
    """Raw files are read as text with explicit placeholder handling"""

    def test_standardize_column_names(self):
        names = standardize_column_names([
            "Record number",
            "Predator quality of length-mass conversion",
            "Notes / assumptions",
        ])
        assert names == [
            "Record.number",
            "Predator.quality.of.length.mass.conversion",
            "Notes...assumptions",
        ]

    def test_load_raw_keeps_placeholders_as_text(self, tmp_path):
        path = tmp_path / "raw.txt"
        path.write_text(
            "Record number\tPredator mass\tSD PP\n"
            "1\t250\tn/a\n"
            "2\t12.5\tNA\n",
            encoding="utf-8",
        )

        df = load_raw_observations(path, encoding="utf-8")

        assert list(df.columns) == ["Record.number", "Predator.mass", "SD.PP"]
        assert df["SD.PP"].tolist() == ["n/a", "NA"]
        assert df["Predator.mass"].tolist() == ["250", "12.5"]

    def test_load_summary_table(self, tmp_path):
        path = tmp_path / "summary.csv"
        path.write_text("a,b\n1,2\n3,4\n", encoding="utf-8")

        summary = load_summary_table(path)

        assert summary.shape == (2, 2)


class TestColumnSelection:
    """Allow-list selection is total and fails loud on missing columns"""

    def test_extra_columns_dropped(self, raw_table):
        selected = select_columns(raw_table)
        assert list(selected.columns) == config.KEEP_COLUMNS
        assert "Notes...assumptions" not in selected.columns

    def test_missing_column_raises(self, raw_table):
        with pytest.raises(KeyError, match="Mean.PP"):
            select_columns(raw_table.drop(columns=["Mean.PP"]))

    def test_input_not_modified(self, raw_table):
        before = raw_table.copy()
        select_columns(raw_table)
        pd.testing.assert_frame_equal(raw_table, before)


class TestTaxonExclusion:

    def test_cephalopods_removed(self, raw_table):
        result = exclude_taxon(raw_table)
        assert "cephalopod" not in result["Predator.taxon"].tolist()
        assert len(result) == len(raw_table) - 1

    def test_match_is_case_sensitive(self):
        df = pd.DataFrame({"Predator.taxon": ["cephalopod", "Cephalopod", "invertebrate"]})
        result = exclude_taxon(df)
        assert result["Predator.taxon"].tolist() == ["Cephalopod", "invertebrate"]

    def test_exclude_values(self):
        df = pd.DataFrame({"stage": ["Adult", "Larva/Juvenile", "Larva"]})
        result = exclude_values(df, "stage", ["Larva/Juvenile"])
        assert result["stage"].tolist() == ["Adult", "Larva"]


class TestMissingValues:

    def test_sentinels_become_nan(self):
        df = pd.DataFrame({"a": ["n/a", " NA ", "", "3", "?"], "b": ["x", "-", "y", "N/A", "z"]})
        result = normalize_missing(df)
        assert result["a"].isna().tolist() == [True, True, True, False, True]
        assert result["b"].isna().tolist() == [False, True, False, True, False]

    def test_other_values_kept_verbatim(self):
        df = pd.DataFrame({"a": ["  adult ", " n/a"], "b": ["12º34'N ", " cephalopod"]})
        result = normalize_missing(df)
        assert result["a"].iloc[0] == "  adult "
        assert pd.isna(result["a"].iloc[1])
        assert result["b"].tolist() == ["12º34'N ", " cephalopod"]

    def test_non_numeric_measurement_raises(self):
        df = pd.DataFrame({"Predator.mass": ["12", "heavy"]})
        with pytest.raises(ValueError):
            coerce_numeric(df, ["Predator.mass"])


@pytest.mark.fail_loud
class TestUnitNormalizer:
    """Lengths end in cm, masses in g, unit columns removed"""

    @staticmethod
    def measurements(length_unit="mm", mass_unit="g", length=120.0, mass=250.0):
        return pd.DataFrame({
            "Predator.length": [length],
            "Predator.length.unit": [length_unit],
            "Predator.mass": [mass],
            "Predator.mass.unit": [mass_unit],
            "Prey.length": [1.0],
            "Prey.length.unit": ["cm"],
            "Prey.mass": [500.0],
            "Prey.mass.unit": ["mg"],
        })

    def test_millimeters_to_centimeters(self):
        result = normalize_units(self.measurements())
        assert result["Predator.length"].iloc[0] == 12.0

    def test_micrometers_to_centimeters(self):
        result = normalize_units(self.measurements(length_unit="µm", length=800.0))
        assert result["Predator.length"].iloc[0] == pytest.approx(0.08)

    def test_milligrams_to_grams(self):
        result = normalize_units(self.measurements())
        assert result["Prey.mass"].iloc[0] == 0.5

    def test_canonical_units_unchanged(self):
        result = normalize_units(self.measurements(length_unit="cm"))
        assert result["Predator.length"].iloc[0] == 120.0
        assert result["Predator.mass"].iloc[0] == 250.0

    def test_unit_columns_removed(self):
        result = normalize_units(self.measurements())
        assert not [c for c in result.columns if c.endswith(".unit")]

    def test_unknown_unit_raises(self):
        with pytest.raises(ValueError, match="inch"):
            normalize_units(self.measurements(length_unit="inch"), policy="error")

    def test_unknown_unit_error_names_rows(self):
        df = pd.concat([self.measurements(), self.measurements(length_unit="inch")],
                       ignore_index=True)
        with pytest.raises(ValueError, match=r"rows: \[1\]"):
            normalize_units(df, policy="error")

    def test_unknown_unit_passthrough(self):
        result = normalize_units(self.measurements(length_unit="inch"), policy="passthrough")
        assert result["Predator.length"].iloc[0] == 120.0

    def test_missing_unit_unchanged(self):
        values = pd.Series([5.0, 20.0], name="Prey.length")
        units = pd.Series(["mm", np.nan], name="Prey.length.unit", dtype=object)
        result = convert_units(values, units, lookups.LENGTH_UNITS, policy="error")
        assert result.tolist() == [0.5, 20.0]


class TestVocabularyNormalizer:
    """Free-text labels map onto a fixed vocabulary"""

    def test_known_values_mapped(self):
        df = pd.DataFrame({"Specific.habitat": ["nearshore waters", "Coastal Bay", "shelf"]})
        result = normalize_vocabulary(df, "Specific.habitat", lookups.HABITAT_LABELS)
        assert result["Specific.habitat"].tolist() == ["Nearshore", "Coastal", "Shelf"]

    def test_unknown_values_unchanged(self):
        df = pd.DataFrame({"Predator.lifestage": ["adult", "senescent", np.nan]})
        result = normalize_vocabulary(df, "Predator.lifestage", lookups.LIFESTAGE_LABELS)
        assert result["Predator.lifestage"].iloc[0] == "Adult"
        assert result["Predator.lifestage"].iloc[1] == "senescent"
        assert pd.isna(result["Predator.lifestage"].iloc[2])

    @pytest.mark.parametrize("column, table", [
        ("Specific.habitat", lookups.HABITAT_LABELS),
        ("Predator.lifestage", lookups.LIFESTAGE_LABELS),
        ("Type.of.feeding.interaction", lookups.INTERACTION_LABELS),
    ])
    def test_idempotent(self, column, table):
        df = pd.DataFrame({column: list(table) + list(table.values()) + ["unlisted"]})
        once = normalize_vocabulary(df, column, table)
        twice = normalize_vocabulary(once, column, table)
        pd.testing.assert_frame_equal(once, twice)

    def test_unmatched_values_counted(self):
        series = pd.Series(["adult", "Adult", "senescent", "senescent", "egg", np.nan])
        unmatched = unmatched_values(series, lookups.LIFESTAGE_LABELS)
        assert unmatched.to_dict() == {"senescent": 2, "egg": 1}


class TestQualityFilter:

    @staticmethod
    def scores(*rows):
        return pd.DataFrame(rows, columns=config.QUALITY_COLUMNS, dtype=float)

    def test_score_five_dropped(self):
        df = self.scores([0, 1, 2], [5, 0, 0], [4, 4, 4], [0, 0, 5])
        result = filter_quality(df)
        assert len(result) == 2
        assert not (result == 5).any().any()

    def test_missing_score_dropped(self):
        df = self.scores([1, np.nan, 1], [3, 3, 3])
        assert len(filter_quality(df)) == 1

    def test_out_of_domain_dropped(self):
        df = self.scores([1, 1, 7], [1, -1, 1], [1, 1, 1])
        assert len(filter_quality(df)) == 1

    def test_non_numeric_score_dropped(self):
        df = pd.DataFrame([["1", "unknown", "4"], ["0", "2", "4"]], columns=config.QUALITY_COLUMNS)
        result = filter_quality(df)
        assert len(result) == 1
        assert result[config.QUALITY_COLUMNS].iloc[0].tolist() == [0, 2, 4]


class TestCoordinateGeocoder:
    """Finite lookup: known strings converted, others untouched"""

    def test_known_strings(self):
        assert lookup_coordinate("29º40'N") == 29.67
        assert lookup_coordinate("85º10'W") == -85.17

    def test_southern_and_western_are_negative(self):
        south = [k for k in lookups.COORDINATE_TABLE if k.endswith("S")]
        west = [k for k in lookups.COORDINATE_TABLE if k.endswith("W")]
        assert all(lookups.COORDINATE_TABLE[k] < 0 for k in south + west)

    def test_unknown_string_returned_unchanged(self):
        value = "12º34'N approx."
        result = lookup_coordinate(value)
        assert result == value
        assert result.encode("utf-8") == value.encode("utf-8")

    def test_lookup_is_pure(self):
        assert lookup_coordinate("41º30'N") == lookup_coordinate("41º30'N") == 41.5

    def test_geocode_columns(self):
        df = pd.DataFrame({
            "Latitude": ["29º40'N", "12.5", "somewhere", np.nan],
            "Longitude": ["85º10'W", "-30.25", "2º00'E", np.nan],
        })
        result = geocode_coordinates(df)
        assert result["Latitude"].tolist()[:3] == [29.67, "12.5", "somewhere"]
        assert result["Longitude"].tolist()[:3] == [-85.17, "-30.25", 2.0]
        assert pd.isna(result["Latitude"].iloc[3])


@pytest.mark.fail_loud
class TestMassRatio:

    def test_ratio_and_log(self):
        df = pd.DataFrame({"Predator.mass": [250.0, 10.0], "Prey.mass": [0.5, 10.0]})
        result = add_mass_ratio(df)
        np.testing.assert_allclose(result["Mass.ratio"], df["Predator.mass"] / df["Prey.mass"])
        np.testing.assert_allclose(result["Log10.mass.ratio"], [np.log10(500.0), 0.0])

    def test_zero_prey_mass_raises(self):
        df = pd.DataFrame({"Predator.mass": [250.0], "Prey.mass": [0.0]})
        with pytest.raises(ValueError, match="non-positive"):
            add_mass_ratio(df)

    def test_negative_prey_mass_raises(self):
        df = pd.DataFrame({"Predator.mass": [250.0], "Prey.mass": [-1.0]})
        with pytest.raises(ValueError):
            add_mass_ratio(df)

    def test_missing_mass_gives_nan(self):
        df = pd.DataFrame({"Predator.mass": [250.0], "Prey.mass": [np.nan]})
        assert pd.isna(add_mass_ratio(df)["Mass.ratio"].iloc[0])


class TestPipeline:

    def test_stage_order_is_fixed(self):
        names = [name for name, _ in CLEANING_STAGES]
        assert names[0] == "select columns"
        assert names[-1] == "add mass ratio"
        assert names.index("normalize units") > names.index("coerce numeric columns")
        assert names.index("exclude ambiguous life stages") > names.index("normalize life stage")

    def test_run_pipeline_applies_in_order(self):
        df = pd.DataFrame({"x": [1, 2, 3]})
        stages = [
            ("double", lambda d: d.assign(x=d["x"] * 2)),
            ("drop small", lambda d: d[d["x"] > 2]),
        ]
        assert run_pipeline(df, stages)["x"].tolist() == [4, 6]


class TestEndToEnd:
    """Raw table to cleaned CSV"""

    @pytest.fixture
    def clean(self, raw_table):
        return clean_observations(raw_table).set_index("Record.number")

    def test_excluded_rows_absent(self, clean):
        # 3: cephalopod, 4: quality 5, 6: ambiguous life stage
        assert clean.index.tolist() == ["1", "2", "5"]

    def test_columns(self, clean, clean_columns):
        assert ["Record.number"] + list(clean.columns) == clean_columns

    def test_length_converted(self, clean):
        assert clean.loc["1", "Predator.length"] == 12.0
        assert clean.loc["2", "Predator.length"] == 35.0
        assert clean.loc["5", "Prey.length"] == pytest.approx(0.08)

    def test_vocabulary_converted(self, clean):
        assert clean.loc["1", "Predator.lifestage"] == "Adult"
        assert clean.loc["1", "Specific.habitat"] == "Nearshore"
        assert clean.loc["2", "Predator.lifestage"] == "Juvenile"
        assert clean.loc["2", "Specific.habitat"] == "Estuary"
        assert clean.loc["5", "Type.of.feeding.interaction"] == "Planktivorous"

    def test_coordinates_converted(self, clean):
        assert clean.loc["1", "Latitude"] == 29.67
        assert clean.loc["1", "Longitude"] == -85.17
        assert clean.loc["5", "Latitude"] == "12.5"

    def test_quality_domain(self, clean):
        for column in config.QUALITY_COLUMNS:
            assert clean[column].isin([0, 1, 2, 3, 4]).all()

    def test_mass_ratio(self, clean):
        assert clean.loc["1", "Prey.mass"] == 0.5
        assert clean.loc["1", "Mass.ratio"] == pytest.approx(500.0)

    def test_placeholder_normalized(self, clean):
        assert clean["SD.PP"].isna().all()

    def test_bad_quality_score_drops_row(self):
        raw = make_raw([{}, {"Prey.quality.of.conversion.to.length": "unknown"}])
        clean = clean_observations(raw)
        assert clean["Record.number"].tolist() == ["1"]

    def test_text_cells_pass_through_verbatim(self):
        raw = make_raw([
            {},
            {"Latitude": "12º34'N ", "Longitude": " 30º00'W", "Prey": "  Callinectes"},
            {"Predator.taxon": " cephalopod"},
        ])
        clean = clean_observations(raw).set_index("Record.number")
        assert clean.index.tolist() == ["1", "2", "3"]
        assert clean.loc["2", "Latitude"] == "12º34'N "
        assert clean.loc["2", "Longitude"] == " 30º00'W"
        assert clean.loc["2", "Prey"] == "  Callinectes"
        assert clean.loc["3", "Predator.taxon"] == " cephalopod"

    def test_write_clean_csv(self, raw_table, tmp_path, clean_columns):
        path = tmp_path / "clean.csv"
        write_clean_csv(clean_observations(raw_table), path)

        written = pd.read_csv(path, encoding="utf-8")
        assert list(written.columns) == clean_columns
        assert len(written) == 3
        assert written["Predator.length"].iloc[0] == 12.0
