"""Tests for the ONI pipeline."""

from unittest.mock import patch

import pandas as pd
import pytest
import requests

from ensosnow.analysis.enso import EL_NINO, LA_NINA, NEUTRAL
from ensosnow.exceptions import (
    ParseFailureError,
    SourceSchemaChangedError,
    SourceUnavailableError,
)
from ensosnow.pipelines.oni import OniPipeline, is_oni_header


class TestIsOniHeader:
    def test_matches_header(self):
        cells = ["ENSO Type", "Season", "JJA", "JAS", "ASO", "SON", "OND", "NDJ"]
        assert is_oni_header(cells)

    def test_rejects_other_rows(self):
        assert not is_oni_header(["Season", "Total"])
        assert not is_oni_header(["2015-2016", "1.0", "1.2"])


class TestExtractTable:
    """Tests for extract_table."""

    def test_extracts_wide_table(self, config, sample_oni_html):
        """Should locate the ONI table past other tables on the page."""
        wide = OniPipeline(config).extract_table(sample_oni_html)

        assert "Season" in wide.columns
        assert "DJF" in wide.columns
        assert wide["Season"].tolist() == ["2014-2015", "2015-2016", "2016-2017", "2017-2018"]

    def test_missing_table(self, config):
        """Should fail loudly when the page no longer has the ONI table."""
        html = "<html><table><tr><td>Year</td><td>Value</td></tr></table></html>"
        with pytest.raises(SourceSchemaChangedError, match="ONI"):
            OniPipeline(config).extract_table(html)

    def test_skips_repeated_header_rows(self, config, sample_oni_html):
        """Should ignore header rows repeated inside the table body."""
        header_row = (
            "<tr><th>ENSO Type</th><th>Season</th><th>JJA</th><th>JAS</th><th>ASO</th>"
            "<th>SON</th><th>OND</th><th>NDJ</th><th>DJF</th><th>JFM</th><th>FMA</th>"
            "<th>MAM</th><th>AMJ</th><th>MJJ</th></tr>"
        )
        html = sample_oni_html.replace("</table>\n</body>", header_row + "</table>\n</body>")
        wide = OniPipeline(config).extract_table(html)
        assert len(wide) == 4

    def test_pads_short_rows(self, config, sample_oni_html):
        """A season in progress has fewer cells; the missing ones are blank."""
        short_row = "<tr><td></td><td>2025-2026</td><td>-0.6</td><td>-0.8</td><td>-0.7</td></tr>"
        html = sample_oni_html.replace("</table>\n</body>", short_row + "</table>\n</body>")

        wide = OniPipeline(config).extract_table(html)

        last = wide.iloc[-1]
        assert last["Season"] == "2025-2026"
        assert last["ASO"] == "-0.7"
        assert last["SON"] == ""
        assert last["MJJ"] == ""

    def test_rejects_rows_longer_than_header(self, config, sample_oni_html):
        long_row = "<tr>" + "<td>0.1</td>" * 15 + "</tr>"
        html = sample_oni_html.replace("</table>\n</body>", long_row + "</table>\n</body>")
        with pytest.raises(SourceSchemaChangedError, match="15 cells"):
            OniPipeline(config).extract_table(html)


class TestProcess:
    """Tests for process."""

    def test_yearly_classification(self, config, sample_oni_html):
        enso = OniPipeline(config).process(sample_oni_html)

        assert list(enso.columns) == ["year", "mean_ONI", "ENSO"]
        assert enso["year"].tolist() == [2014, 2015, 2016]
        by_year = enso.set_index("year")
        assert by_year.loc[2014, "mean_ONI"] == pytest.approx(3.4 / 12)
        assert by_year.loc[2015, "mean_ONI"] == pytest.approx(1.0)
        assert by_year.loc[2016, "mean_ONI"] == pytest.approx(-6.7 / 12)
        assert by_year["ENSO"].tolist() == [NEUTRAL, EL_NINO, LA_NINA]

    def test_year_without_values_dropped(self, config, sample_oni_html):
        enso = OniPipeline(config).process(sample_oni_html)
        assert 2017 not in enso["year"].tolist()

    def test_partial_season_classified(self, config, sample_oni_html):
        short_row = "<tr><td></td><td>2025-2026</td><td>-0.6</td><td>-0.8</td><td>-0.7</td></tr>"
        html = sample_oni_html.replace("</table>\n</body>", short_row + "</table>\n</body>")

        enso = OniPipeline(config).process(html).set_index("year")

        assert enso.loc[2025, "mean_ONI"] == pytest.approx(-0.7)
        assert enso.loc[2025, "ENSO"] == LA_NINA

    def test_non_numeric_value(self, config, sample_oni_html):
        html = sample_oni_html.replace("<td>1.2</td>", "<td>1.2?</td>")
        with pytest.raises(ParseFailureError, match="1.2"):
            OniPipeline(config).process(html)


class TestValidate:
    """Tests for validate."""

    def test_valid_table(self, config, sample_oni_html):
        pipeline = OniPipeline(config)
        result = pipeline.validate(pipeline.process(sample_oni_html))
        assert result.valid
        assert result.total_rows == 3

    def test_empty_table(self, config):
        result = OniPipeline(config).validate(pd.DataFrame(columns=["year", "mean_ONI", "ENSO"]))
        assert not result.valid
        assert "No ONI years found" in result.issues

    def test_duplicate_years(self, config):
        df = pd.DataFrame({
            "year": [2015, 2015],
            "mean_ONI": [1.0, 1.1],
            "ENSO": [EL_NINO, EL_NINO],
        })
        result = OniPipeline(config).validate(df)
        assert not result.valid
        assert any("Duplicate years" in issue for issue in result.issues)

    def test_out_of_range_mean(self, config):
        df = pd.DataFrame({"year": [2015], "mean_ONI": [12.0], "ENSO": [EL_NINO]})
        result = OniPipeline(config).validate(df)
        assert not result.valid
        assert result.outliers_count == 1


class TestRun:
    """Tests for the full download → process → validate run."""

    @patch("ensosnow.utils.io.requests.get")
    def test_run(self, mock_get, config, sample_oni_html, mock_response):
        mock_get.return_value = mock_response(sample_oni_html)

        enso, validation = OniPipeline(config).run()

        assert validation.valid
        assert len(enso) == 3
        assert mock_get.call_args[0][0] == config.oni_url
        assert mock_get.call_args[1]["timeout"] == config.timeout

    @patch("ensosnow.utils.io.requests.get")
    def test_source_unavailable(self, mock_get, config):
        mock_get.side_effect = requests.ConnectionError("no route to host")

        with pytest.raises(SourceUnavailableError):
            OniPipeline(config).run()
