"""
End-to-end pipeline tests

scenes on disk -> NDVI stack -> zonal means -> tidy table
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from ndviseries import run_pipeline
from ndviseries.core.exceptions import ConfigurationError, LoadError
from ndviseries.core.pipeline import PipelineConfig
from ndviseries.io.regions import Region
from ndviseries.sample_data import SAMPLE_REGIONS_FILE, create_sample_data


class TestTwoSceneScenario:
    """Two 2x2 scenes, one region over all four pixels"""

    def test_defined_and_undefined_records(self, scene_a, scene_b, full_region):
        tidy = run_pipeline([scene_a, scene_b], [full_region])

        assert len(tidy) == 2
        first, second = tidy.itertuples(index=False)
        assert first.region == "S1"
        assert first.date == date(2018, 6, 12)
        assert first.value == pytest.approx((0.5 - 0.1) / (0.5 + 0.1), rel=1e-6)
        assert second.date == date(2019, 7, 1)
        assert np.isnan(second.value)

    def test_input_order_without_sort(self, scene_a, scene_b, full_region):
        config = PipelineConfig(sort=False)
        tidy = run_pipeline([scene_b, scene_a], [full_region], config=config)
        assert tidy["date"].tolist() == [date(2019, 7, 1), date(2018, 6, 12)]

    def test_directory_input(self, scene_a, scene_b, full_region, tmp_path):
        tidy = run_pipeline(tmp_path, [full_region])
        assert tidy["date"].tolist() == [date(2018, 6, 12), date(2019, 7, 1)]

    def test_unknown_sensor(self, scene_a, full_region):
        with pytest.raises(ConfigurationError):
            run_pipeline([scene_a], [full_region], config=PipelineConfig(sensor="modis"))

    def test_unreadable_scene(self, scene_a, full_region, tmp_path):
        bogus = tmp_path / "LC08_20200101.tif"
        bogus.write_text("not a raster")
        with pytest.raises(LoadError, match="LC08_20200101"):
            run_pipeline([scene_a, bogus], [full_region])

    def test_duplicate_region_ids(self, scene_a, full_region):
        twin = Region("S1", "grassland", full_region.geometry, full_region.crs)
        with pytest.raises(LoadError, match="S1"):
            run_pipeline([scene_a], [full_region, twin])


class TestSampleData:
    @pytest.fixture(scope="class")
    def sample_dir(self, tmp_path_factory):
        return create_sample_data(str(tmp_path_factory.mktemp("sample")))

    def test_sample_pipeline(self, sample_dir):
        tidy = run_pipeline(sample_dir, f"{sample_dir}/{SAMPLE_REGIONS_FILE}")

        assert tidy.columns.tolist() == ["region", "label", "date", "value"]
        assert len(tidy) == 6
        assert tidy["value"].notna().all()
        assert tidy["value"].between(-1, 1).all()

        by_site = tidy.groupby("region")["value"].mean()
        assert by_site["RIP01"] > by_site["GRS01"]

        riparian = tidy[tidy["region"] == "RIP01"].set_index("date")["value"]
        assert riparian[date(2018, 6, 12)] > riparian[date(2018, 1, 15)]

    def test_writes_csv(self, sample_dir, tmp_path):
        output = tmp_path / "out" / "ndvi.csv"
        tidy = run_pipeline(sample_dir, f"{sample_dir}/{SAMPLE_REGIONS_FILE}", output_path=output)

        written = pd.read_csv(output)
        assert written.columns.tolist() == ["region", "label", "date", "value"]
        assert written["date"].tolist() == [d.isoformat() for d in tidy["date"]]

    def test_idempotent(self, sample_dir, tmp_path):
        regions = f"{sample_dir}/{SAMPLE_REGIONS_FILE}"
        run_pipeline(sample_dir, regions, output_path=tmp_path / "run1.csv")
        run_pipeline(sample_dir, regions, output_path=tmp_path / "run2.csv")
        assert (tmp_path / "run1.csv").read_bytes() == (tmp_path / "run2.csv").read_bytes()

    def test_parallel_matches_sequential(self, sample_dir):
        regions = f"{sample_dir}/{SAMPLE_REGIONS_FILE}"
        sequential = run_pipeline(sample_dir, regions)
        parallel = run_pipeline(sample_dir, regions, config=PipelineConfig(max_workers=3))
        pd.testing.assert_frame_equal(sequential, parallel)

