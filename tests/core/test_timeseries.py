"""
Tests for tidy reshaping
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from ndviseries.core.exceptions import DateParseError
from ndviseries.core.timeseries import ZonalRecord, parse_layer_date, to_records, to_tidy


@pytest.fixture
def wide():
    return pd.DataFrame(
        {
            "region": ["RIP01", "GRS01"],
            "label": ["riparian forest", "grassland"],
            "20190701": [0.71, 0.32],
            "20180612": [0.65, np.nan],
        }
    )


class TestParseLayerDate:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("20180612", date(2018, 6, 12)),
            ("20190701", date(2019, 7, 1)),
            ("2019-07-01", date(2019, 7, 1)),
            ("2019_07_01", date(2019, 7, 1)),
            ("ndvi_20180612", date(2018, 6, 12)),
            ("LC08_L2SP_042036_20180612_20200831_02_T1", date(2018, 6, 12)),
        ],
    )
    def test_layouts(self, name, expected):
        assert parse_layer_date(name) == expected

    @pytest.mark.parametrize("name", ["abc", "2018612", "2019-0701", "20181301", "20180231"])
    def test_rejects(self, name):
        with pytest.raises(DateParseError, match=name):
            parse_layer_date(name)


class TestToTidy:
    def test_columns(self, wide):
        tidy = to_tidy(wide)
        assert tidy.columns.tolist() == ["region", "label", "date", "value"]
        assert len(tidy) == 4

    def test_region_by_region_in_column_order(self, wide):
        tidy = to_tidy(wide)
        assert tidy["region"].tolist() == ["RIP01", "RIP01", "GRS01", "GRS01"]
        assert tidy["date"].tolist() == [
            date(2019, 7, 1),
            date(2018, 6, 12),
            date(2019, 7, 1),
            date(2018, 6, 12),
        ]

    def test_sorted(self, wide):
        tidy = to_tidy(wide, sort=True)
        assert tidy["region"].tolist() == ["GRS01", "GRS01", "RIP01", "RIP01"]
        assert tidy["date"].tolist() == [
            date(2018, 6, 12),
            date(2019, 7, 1),
            date(2018, 6, 12),
            date(2019, 7, 1),
        ]
        assert tidy.index.tolist() == [0, 1, 2, 3]

    def test_values_keep_nan(self, wide):
        tidy = to_tidy(wide, sort=True)
        assert np.isnan(tidy.loc[0, "value"])
        assert tidy.loc[1, "value"] == pytest.approx(0.32)
        assert tidy.loc[3, "label"] == "riparian forest"

    def test_bad_column_raises(self, wide):
        wide["abc"] = [1.0, 2.0]
        with pytest.raises(DateParseError, match="abc"):
            to_tidy(wide)

    def test_custom_identity_columns(self, wide):
        renamed = wide.rename(columns={"region": "site_id", "label": "veg"})
        tidy = to_tidy(renamed, id_column="site_id", label_column="veg")
        assert tidy.columns.tolist() == ["region", "label", "date", "value"]

    def test_missing_identity_column(self, wide):
        with pytest.raises(KeyError):
            to_tidy(wide.drop(columns=["label"]))


class TestToRecords:
    def test_records(self, wide):
        records = list(to_records(to_tidy(wide, sort=True)))
        assert records[3] == ZonalRecord("RIP01", "riparian forest", date(2019, 7, 1), 0.71)
        assert np.isnan(records[0].value)
