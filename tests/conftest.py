"""Shared pytest fixtures for ensosnow tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- live: Real source tests, slow, requires network

Run live tests with: pytest -m live --run-live
"""

import json
from unittest.mock import Mock

import pytest
import requests

from ensosnow.config import AnalysisConfig


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live source tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "live: real source tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


def make_response(text: str, status_code: int = 200) -> Mock:
    """Build a mock requests.Response."""
    response = Mock()
    response.text = text
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status = Mock(
            side_effect=requests.HTTPError(f"{status_code} Error")
        )
    else:
        response.raise_for_status = Mock()
    return response


# Three seasons of ONI values: 2014 Neutral, 2015 El Niño, 2016 La Niña,
# 2017 has no values at all
SAMPLE_ONI_HTML = """
<html><body>
<table><tr><td>Navigation</td><td>Home</td></tr></table>
<table>
  <tr><th>ENSO Type</th><th>Season</th><th>JJA</th><th>JAS</th><th>ASO</th>
      <th>SON</th><th>OND</th><th>NDJ</th><th>DJF</th><th>JFM</th><th>FMA</th>
      <th>MAM</th><th>AMJ</th><th>MJJ</th></tr>
  <tr><td></td><td>2014-2015</td><td>0.1</td><td>0.0</td><td>0.2</td><td>0.4</td>
      <td>0.6</td><td>0.7</td><td>0.6</td><td>0.5</td><td>0.3</td><td>0.1</td>
      <td>0.0</td><td>-0.1</td></tr>
  <tr><td>VS</td><td>2015-2016</td><td>1.0</td><td>1.2</td><td>0.8</td><td></td>
      <td></td><td></td><td></td><td></td><td></td><td></td><td></td><td></td></tr>
  <tr><td>WL</td><td>2016-2017</td><td>-0.4</td><td>-0.5</td><td>-0.6</td><td>-0.7</td>
      <td>-0.7</td><td>-0.6</td><td>-0.5</td><td>-0.5</td><td>-0.4</td><td>-0.6</td>
      <td>-0.6</td><td>-0.6</td></tr>
  <tr><td></td><td>2017-2018</td><td></td><td></td><td></td><td></td><td></td>
      <td></td><td></td><td></td><td></td><td></td><td></td><td></td></tr>
</table>
</body></html>
"""


def wsdot_entries(year: int, months: list[int], new: float = 10.0, total: float = 40.0) -> list[dict]:
    """Build WSDOT SnowFallData month entries."""
    names = {
        1: "January", 2: "February", 3: "March", 4: "April", 5: "May", 6: "June",
        7: "July", 8: "August", 9: "September", 10: "October", 11: "November",
        12: "December",
    }
    return [
        {
            "year": year,
            "monthNum": m,
            "month": names[m],
            "avgNewSnowfallInches": new + m,
            "avgTotalSnowfallInches": total + m,
            "displayOrder": i,
            "dailySnowFall": [{"day": 1, "newSnowfall": 1.0}],
        }
        for i, m in enumerate(months)
    ]


def wsdot_html(entries: list[dict]) -> str:
    """Wrap entries the way the service does: JSON text inside a <p>."""
    return f"<html><body><p>{json.dumps(entries)}</p></body></html>"


SAMPLE_SKIMOUNTAINEER_HTML = """
<html><body>
<table><tr><td>Cascade Ski</td></tr></table>
<table>
  <tr><td colspan="18">Average Annual Snowfall by ENSO Phase</td></tr>
  <tr><td colspan="18">1950-2004</td></tr>
  <tr><td>#</td><td>ENSO Phase</td><td>Total Years</td><td>Notes</td>
      <td>Holden Village</td><td>Stevens Pass</td><td>Snoqualmie Pass</td>
      <td>Stampede Pass</td><td>Paradise 5400ft</td><td>Longmire</td><td>Mt. Baker</td></tr>
  <tr><td>1</td><td>Strong El Ni&ntilde;o</td><td>6</td><td></td>
      <td>200"</td><td>300"</td><td>250"</td><td>280"</td><td>500"</td><td>100"</td><td>450"</td></tr>
  <tr><td>2</td><td>Weak El Ni&ntilde;o</td><td>10</td><td></td>
      <td>250"</td><td>400"</td><td>350"</td><td>350"</td><td>600"</td><td>125"</td><td>550"</td></tr>
  <tr><td>3</td><td>Neutral</td><td>20</td><td></td>
      <td>260"</td><td>420"</td><td>380"</td><td>360"</td><td>650"</td><td>130"</td><td>600"</td></tr>
  <tr><td>4</td><td>Weak La Ni&ntilde;a</td><td>9</td><td></td>
      <td>280"</td><td>450"</td><td>400"</td><td>400"</td><td>700"</td><td>150"</td><td>650"</td></tr>
  <tr><td>5</td><td>Strong La Ni&ntilde;a</td><td>8</td><td></td>
      <td>350"</td><td>540"</td><td>500"</td><td>480"</td><td>840"</td><td>180"</td><td>800"</td></tr>
  <tr><td></td><td></td><td>Max 1999</td><td></td>
      <td>500"</td><td>700"</td><td>600"</td><td>600"</td><td>1100"</td><td>250"</td><td>1100"</td></tr>
  <tr><td></td><td>Overall Average</td><td>53</td><td></td>
      <td>270"</td><td>420"</td><td>380"</td><td>370"</td><td>660"</td><td>135"</td><td>610"</td></tr>
</table>
</body></html>
"""


@pytest.fixture
def config(tmp_path) -> AnalysisConfig:
    """Analysis config rooted in a temporary directory."""
    return AnalysisConfig(base_dir=tmp_path, timeout=5)


@pytest.fixture
def sample_oni_html() -> str:
    return SAMPLE_ONI_HTML


@pytest.fixture
def sample_skimountaineer_html() -> str:
    return SAMPLE_SKIMOUNTAINEER_HTML


@pytest.fixture
def mock_response():
    """Factory for mock requests.Response objects."""
    return make_response


@pytest.fixture
def snowfall_entries():
    """Factory for WSDOT month entries."""
    return wsdot_entries


@pytest.fixture
def snowfall_html():
    """Factory wrapping WSDOT entries in an HTML fragment."""
    return wsdot_html
