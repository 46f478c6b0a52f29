"""Rapor görünüm modeli: iki biçim, güven yüzdesi, şiddet stilleri."""
import pytest

from tonguemap.services.mock_analysis import mock_tongue_analysis
from tonguemap.services.report_pdf import render_report_html
from tonguemap.services.report_view import (
    REPORT_TITLE,
    UNKNOWN_PATTERN,
    build_report_context,
    confidence_tier,
    find_herbal_formula,
    format_confidence,
    severity_style,
    to_legacy_fields,
)
from tonguemap.schemas import parse_analysis_result


@pytest.mark.parametrize(
    "value,expected",
    [(0.885, "89% confidence"), (0.845, "85% confidence"), (0.0, "0% confidence"), (1.0, "100% confidence")],
)
def test_format_confidence_rounds_half_up(value, expected):
    assert format_confidence(value) == expected


def test_format_confidence_missing():
    assert format_confidence(None) is None


def test_confidence_tier():
    assert confidence_tier(0.9) == "high"
    assert confidence_tier(0.65) == "medium"
    assert confidence_tier(0.1) == "very low"


def test_severity_style_fallback():
    assert severity_style("Severe")["key"] == "severe"
    assert severity_style("catastrophic")["key"] == "moderate"
    assert severity_style(None)["css"] == "severity-moderate"


def test_find_herbal_formula_substring():
    info = find_herbal_formula("Spleen Qi Deficiency with Dampness")
    assert info["name"] == "Spleen Qi Deficiency"
    assert find_herbal_formula(None, "Unknown") is None


def test_current_context():
    ctx = build_report_context(mock_tongue_analysis(), report_date="01.01.2026 10:00")
    assert ctx["format"] == "current"
    assert ctx["title"] == REPORT_TITLE
    assert ctx["report_date"] == "01.01.2026 10:00"
    assert ctx["primary_pattern"]["name"] == "Spleen Qi Deficiency with Dampness"
    assert ctx["primary_pattern"]["confidence_text"] == "88% confidence"
    assert ctx["severity"]["key"] == "moderate"
    assert ctx["legacy"] is None
    assert ctx["eight_principles"]


def test_current_context_with_missing_sections():
    ctx = build_report_context({"patternDifferentiation": None})
    assert ctx["format"] == "current"
    assert ctx["primary_pattern"]["name"] == UNKNOWN_PATTERN
    assert ctx["primary_pattern"]["confidence_text"] is None
    assert ctx["herbal_formula"] is None
    assert ctx["tongue_examination"] is None


def test_legacy_context():
    ctx = build_report_context(
        {"primaryPattern": "Liver Qi Stagnation", "coat": "thin", "tongueZones": {"tip": "red"}}
    )
    assert ctx["format"] == "legacy"
    assert ctx["severity"]["key"] == "mild"
    assert ctx["legacy"]["recommended_formula"] == "Custom TCM Formula"
    assert ctx["legacy"]["formula_info"]["chinese"] == "逍遥散"
    tip = next(z for z in ctx["legacy"]["tongue_zones"] if z["id"] == "tip")
    assert tip["description"] == "red"


def test_to_legacy_fields_from_current():
    fields = to_legacy_fields(parse_analysis_result(mock_tongue_analysis()))
    assert fields["primary_pattern"] == "Spleen Qi Deficiency with Dampness"
    assert fields["severity"] == "moderate"
    assert fields["recommendations"] == "Tonify Spleen Qi and resolve dampness"


def test_render_html_escapes_content():
    html = render_report_html({"primaryPattern": "<script>alert(1)</script>"})
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


OPTIONAL_SECTIONS = [
    "eightPrinciples",
    "zangFuDiagnosis",
    "tongueExamination",
    "treatmentPrinciples",
    "herbalFormula",
    "acupuncture",
    "lifestyleRecommendations",
    "prognosis",
    "followUp",
]


@pytest.mark.parametrize("section", OPTIONAL_SECTIONS)
@pytest.mark.parametrize("mode", ["missing", "null"])
def test_render_without_optional_section(section, mode):
    data = mock_tongue_analysis()
    if mode == "missing":
        del data[section]
    else:
        data[section] = None
    html = render_report_html(data)
    assert "Spleen Qi Deficiency with Dampness" in html


def _set_path(data: dict, path: str, value):
    *parents, last = path.split(".")
    node = data
    for key in parents:
        node = node[key]
    node[last] = value


@pytest.mark.parametrize(
    "path",
    [
        "zangFuDiagnosis.secondaryOrgans",
        "patternDifferentiation.secondaryPatterns",
        "patternDifferentiation.differentialDiagnosis",
        "tongueExamination.zones",
        "tongueExamination.zones.tip",
        "tongueExamination.body.features",
        "herbalFormula.modifications",
        "herbalFormula.alternatives",
        "acupuncture.primaryPoints",
        "acupuncture.supplementaryPoints",
        "acupuncture.moxibustion.recommended",
    ],
)
def test_render_with_null_nested_value(path):
    data = mock_tongue_analysis()
    _set_path(data, path, None)
    ctx = build_report_context(data)
    assert ctx["primary_pattern"]["name"] == "Spleen Qi Deficiency with Dampness"
    assert "Spleen Qi Deficiency with Dampness" in render_report_html(data)


def test_null_primary_pattern_shows_placeholder():
    data = mock_tongue_analysis()
    data["patternDifferentiation"]["primaryPattern"] = None
    ctx = build_report_context(data)
    assert ctx["primary_pattern"]["name"] == UNKNOWN_PATTERN
    assert UNKNOWN_PATTERN in render_report_html(data)


def test_null_list_items_are_skipped():
    data = mock_tongue_analysis()
    data["patternDifferentiation"]["secondaryPatterns"] = [None, {"name": "Mild Qi Sinking"}]
    ctx = build_report_context(data)
    assert [p["name"] for p in ctx["secondary_patterns"]] == ["Mild Qi Sinking"]
