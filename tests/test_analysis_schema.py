"""Sonuç şeması: biçim ayrımı, güven sıkıştırma, esnek listeler."""
import pytest

from tonguemap.schemas import parse_analysis_result
from tonguemap.schemas.analysis import LegacyTongueAnalysis, TongueAnalysis, dump_analysis, is_current_format
from tonguemap.services.mock_analysis import mock_tongue_analysis


def test_current_format_detected_by_key():
    assert is_current_format({"patternDifferentiation": {}})
    assert not is_current_format({"primaryPattern": "x"})
    assert isinstance(parse_analysis_result(mock_tongue_analysis()), TongueAnalysis)


def test_legacy_format():
    result = parse_analysis_result({"primaryPattern": "Damp-Heat", "secondaryPatterns": "Qi Stagnation"})
    assert isinstance(result, LegacyTongueAnalysis)
    assert result.primary_pattern == "Damp-Heat"
    assert result.secondary_patterns == ["Qi Stagnation"]


def test_empty_dict_is_legacy():
    result = parse_analysis_result({})
    assert isinstance(result, LegacyTongueAnalysis)
    assert result.primary_pattern is None


def test_non_dict_rejected():
    with pytest.raises(ValueError):
        parse_analysis_result(["not", "a", "dict"])


@pytest.mark.parametrize("raw,expected", [(1.7, 1.0), (-0.2, 0.0), ("0.5", 0.5), ("high", None), (True, None)])
def test_confidence_clamped(raw, expected):
    data = {"patternDifferentiation": {"primaryPattern": {"name": "X", "confidence": raw}}}
    result = parse_analysis_result(data)
    assert result.pattern_differentiation.primary_pattern.confidence == expected


def test_null_pattern_differentiation():
    result = parse_analysis_result({"patternDifferentiation": None})
    assert result.pattern_differentiation.primary_pattern.name is None
    assert result.pattern_differentiation.secondary_patterns == []


def test_unknown_fields_survive_dump():
    data = mock_tongue_analysis()
    data["extraSection"] = {"note": "kept"}
    dumped = dump_analysis(parse_analysis_result(data))
    assert dumped["extraSection"] == {"note": "kept"}
    assert dumped["patternDifferentiation"]["primaryPattern"]["name"] == "Spleen Qi Deficiency with Dampness"


def test_mock_result_is_fresh_copy():
    a = mock_tongue_analysis()
    a["patternDifferentiation"]["primaryPattern"]["name"] = "changed"
    assert mock_tongue_analysis()["patternDifferentiation"]["primaryPattern"]["name"] != "changed"
