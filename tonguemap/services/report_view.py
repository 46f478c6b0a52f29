"""
Sonuç görünüm modeli: iki biçimden (güncel v2 / eski düz) tek tip rapor bağlamı üretir.

Biçim ayrımı parse_analysis_result içinde bir kez yapılır; burada yalnızca tipe göre dallanılır.
Her bölüm bağımsız olarak opsiyoneldir: eksikse None (şablon o bloğu atlar).
"""
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from tonguemap.schemas.analysis import (
    AnalysisResult,
    LegacyTongueAnalysis,
    Pattern,
    TongueAnalysis,
    parse_analysis_result,
)

REPORT_TITLE = "TCM Tongue Analysis Report"
UNKNOWN_PATTERN = "Pattern not determined"

SEVERITY_STYLES: dict[str, dict] = {
    "mild": {"label": "Mild", "css": "severity-mild", "color": "#166534", "background": "#dcfce7"},
    "moderate": {"label": "Moderate", "css": "severity-moderate", "color": "#92400e", "background": "#fef3c7"},
    "significant": {"label": "Significant", "css": "severity-significant", "color": "#991b1b", "background": "#fee2e2"},
    "severe": {"label": "Severe", "css": "severity-severe", "color": "#7f1d1d", "background": "#fecaca"},
}
DEFAULT_SEVERITY = "moderate"

# Dil bölgeleri ve organ karşılıkları (sabit harita)
TONGUE_ZONES = [
    {"id": "tip", "name": "Tip", "organ": "Heart & Lungs"},
    {"id": "center", "name": "Center", "organ": "Spleen & Stomach"},
    {"id": "root", "name": "Root", "organ": "Kidneys"},
    {"id": "sides", "name": "Sides", "organ": "Liver & Gallbladder"},
]

TCM_PRINCIPLES = [
    {
        "id": "coat",
        "title": "Tongue Coat (苔 - Tāi)",
        "description": "The coating reflects the state of the digestive system and the presence of pathogenic factors.",
        "details": [
            {"type": "Thin White Coat", "meaning": "Normal or mild condition"},
            {"type": "Thick Coat", "meaning": "Dampness, phlegm, or food stagnation"},
            {"type": "Yellow Coat", "meaning": "Heat or inflammation present"},
            {"type": "No Coat (Peeled)", "meaning": "Yin deficiency, stomach yin damage"},
        ],
    },
    {
        "id": "color",
        "title": "Body Color (质 - Zhì)",
        "description": "The tongue body color indicates the state of blood, qi, and internal organs.",
        "details": [
            {"type": "Pale/Pink", "meaning": "Normal or qi/blood deficiency"},
            {"type": "Red", "meaning": "Heat pattern present"},
            {"type": "Purple/Blue", "meaning": "Blood stasis or cold"},
        ],
    },
    {
        "id": "shape",
        "title": "Tongue Shape (形 - Xíng)",
        "description": "Shape and texture reveal organ function and fluid metabolism.",
        "details": [
            {"type": "Swollen/Tender", "meaning": "Fluid retention, spleen qi deficiency"},
            {"type": "Thin/Emaciated", "meaning": "Blood or yin deficiency"},
            {"type": "Teeth Marks", "meaning": "Spleen qi deficiency with dampness"},
            {"type": "Cracks/Fissures", "meaning": "Yin deficiency, dryness"},
        ],
    },
]

# Eski sonuçlar için ek formül bilgisi (örüntü/formül adında alt dize eşleşmesi)
HERBAL_FORMULAS: dict[str, dict] = {
    "Spleen Qi Deficiency": {
        "chinese": "四君子汤",
        "ingredients": ["Ren Shen (Ginseng)", "Bai Zhu (Atractylodes)", "Fu Ling (Poria)", "Zhi Gan Cao (Licorice)"],
        "benefits": ["Strengthens digestion", "Boosts energy", "Improves absorption"],
        "lifestyle": "Eat warm, cooked foods. Avoid cold drinks and raw foods.",
    },
    "Liver Qi Stagnation": {
        "chinese": "逍遥散",
        "ingredients": ["Chai Hu (Bupleurum)", "Bai Shao (White Peony)", "Dang Gui (Angelica)"],
        "benefits": ["Relieves stress", "Regulates emotions", "Improves digestion"],
        "lifestyle": "Practice deep breathing. Regular exercise. Express emotions.",
    },
    "Damp-Heat": {
        "chinese": "三仁汤",
        "ingredients": ["Xing Ren (Apricot Seed)", "Bai Dou Kou (Cardamom)", "Yi Yi Ren (Coix Seed)"],
        "benefits": ["Clears dampness", "Reduces inflammation", "Improves metabolism"],
        "lifestyle": "Avoid greasy, fried foods. Stay hydrated. Light exercise.",
    },
    "Blood Deficiency": {
        "chinese": "四物汤",
        "ingredients": ["Dang Gui (Angelica)", "Chuan Xiong (Ligusticum)", "Bai Shao (White Peony)"],
        "benefits": ["Nourishes blood", "Improves circulation", "Enhances complexion"],
        "lifestyle": "Eat blood-nourishing foods like beets and spinach.",
    },
}

EIGHT_PRINCIPLE_LABELS = (
    ("exterior_interior", "Exterior / Interior"),
    ("hot_cold", "Hot / Cold"),
    ("excess_deficiency", "Excess / Deficiency"),
    ("yin_yang", "Yin / Yang"),
)


def _percent(value: float) -> int:
    clamped = min(1.0, max(0.0, float(value)))
    return int((Decimal(str(clamped)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_confidence(value: float | None) -> str | None:
    """0.885 -> '89% confidence' (yarım yukarı yuvarlama)."""
    if value is None:
        return None
    return f"{_percent(value)}% confidence"


def confidence_tier(value: float | None) -> str | None:
    if value is None:
        return None
    if value >= 0.8:
        return "high"
    if value >= 0.6:
        return "medium"
    if value >= 0.4:
        return "low"
    return "very low"


def severity_style(severity: str | None) -> dict:
    """Bilinmeyen şiddet değerleri 'moderate' stiline düşer."""
    key = (severity or "").strip().lower()
    if key not in SEVERITY_STYLES:
        key = DEFAULT_SEVERITY
    return {"key": key, **SEVERITY_STYLES[key]}


def find_herbal_formula(*texts: str | None) -> dict | None:
    for key, info in HERBAL_FORMULAS.items():
        needle = key.lower()
        if any(t and needle in t.lower() for t in texts):
            return {"name": key, **info}
    return None


def _confidence_fields(value: float | None) -> dict:
    return {
        "confidence": value,
        "confidence_text": format_confidence(value),
        "confidence_tier": confidence_tier(value),
    }


def _pattern_block(p: Pattern) -> dict:
    return {
        "name": p.name or UNKNOWN_PATTERN,
        "chinese_name": p.chinese_name,
        "chinese_characters": p.chinese_characters,
        "severity": p.severity,
        "evidence": p.evidence,
        "clinical_manifestations": p.clinical_manifestations,
        "relationship": p.relationship_to_primary,
        **_confidence_fields(p.confidence),
    }


def _dump(model) -> dict | None:
    """Alt bölüm modelini şablon için düz sözlüğe çevirir; yoksa None."""
    if model is None:
        return None
    return model.model_dump(exclude_none=True)


def _eight_principles(result: TongueAnalysis) -> list[dict] | None:
    ep = result.eight_principles
    if ep is None:
        return None
    rows = []
    for attr, label in EIGHT_PRINCIPLE_LABELS:
        item = getattr(ep, attr)
        if item is None:
            continue
        rows.append(
            {
                "label": label,
                "classification": item.classification,
                "evidence": item.evidence,
                **_confidence_fields(item.confidence),
            }
        )
    return rows or None


def _zang_fu(result: TongueAnalysis) -> dict | None:
    zf = result.zang_fu_diagnosis
    if zf is None or (zf.primary_organ is None and not zf.secondary_organs):
        return None

    def organ(o):
        return {"organ": o.organ, "pathology": o.pathology, **_confidence_fields(o.confidence)}

    return {
        "primary": organ(zf.primary_organ) if zf.primary_organ else None,
        "secondary": [organ(o) for o in zf.secondary_organs],
    }


def _tongue_examination(result: TongueAnalysis) -> dict | None:
    te = result.tongue_examination
    if te is None:
        return None
    zones = []
    for zone in TONGUE_ZONES:
        finding = getattr(te.zones, zone["id"])
        zones.append(
            {
                **zone,
                "description": finding.description,
                "organ_correlation": finding.organ_correlation,
                "findings": finding.findings,
            }
        )
    coating = _dump(te.coating)
    body = _dump(te.body)
    if te.coating is not None:
        coating["color_confidence_text"] = format_confidence(te.coating.color_confidence)
        coating["thickness_confidence_text"] = format_confidence(te.coating.thickness_confidence)
        coating["moisture_confidence_text"] = format_confidence(te.coating.moisture_confidence)
    if te.body is not None:
        body["color_confidence_text"] = format_confidence(te.body.color_confidence)
        body["shape_confidence_text"] = format_confidence(te.body.shape_confidence)
    return {
        "overall": _dump(te.overall_assessment),
        "coating": coating,
        "body": body,
        "zones": zones,
    }


def _herbal_formula(result: TongueAnalysis) -> dict | None:
    hf = result.herbal_formula
    if hf is None:
        return None
    data = _dump(hf)
    if hf.recommended is not None:
        data["recommended"]["confidence_text"] = format_confidence(hf.recommended.confidence)
    return data


def _current_context(result: TongueAnalysis) -> dict:
    pd = result.pattern_differentiation
    primary = _pattern_block(pd.primary_pattern)
    return {
        "format": "current",
        "metadata": _dump(result.analysis_metadata),
        "severity": severity_style(pd.primary_pattern.severity),
        "primary_pattern": primary,
        "secondary_patterns": [_pattern_block(p) for p in pd.secondary_patterns],
        "differential_diagnosis": [_dump(d) for d in pd.differential_diagnosis],
        "eight_principles": _eight_principles(result),
        "zang_fu": _zang_fu(result),
        "tongue_examination": _tongue_examination(result),
        "treatment_principles": _dump(result.treatment_principles),
        "herbal_formula": _herbal_formula(result),
        "acupuncture": _dump(result.acupuncture),
        "lifestyle": _dump(result.lifestyle_recommendations),
        "prognosis": _dump(result.prognosis),
        "follow_up": _dump(result.follow_up),
        "legacy": None,
    }


def _legacy_context(result: LegacyTongueAnalysis) -> dict:
    name = result.primary_pattern or UNKNOWN_PATTERN
    zones = None
    if result.tongue_zones is not None:
        zones = [
            {**zone, "description": getattr(result.tongue_zones, zone["id"])}
            for zone in TONGUE_ZONES
        ]
    return {
        "format": "legacy",
        "metadata": None,
        "severity": severity_style(result.severity or "mild"),
        "primary_pattern": {
            "name": name,
            "chinese_name": None,
            "chinese_characters": None,
            "severity": result.severity,
            "evidence": [],
            "clinical_manifestations": [],
            "relationship": None,
            **_confidence_fields(None),
        },
        "secondary_patterns": [
            {"name": s, "relationship": None, **_confidence_fields(None)} for s in result.secondary_patterns
        ],
        "differential_diagnosis": [],
        "eight_principles": None,
        "zang_fu": None,
        "tongue_examination": None,
        "treatment_principles": None,
        "herbal_formula": None,
        "acupuncture": None,
        "lifestyle": None,
        "prognosis": None,
        "follow_up": None,
        "legacy": {
            "coat": result.coat,
            "color": result.color,
            "shape": result.shape,
            "moisture": result.moisture,
            "recommendations": result.recommendations,
            "recommended_formula": result.recommended_formula or "Custom TCM Formula",
            "formula_info": find_herbal_formula(result.primary_pattern, result.recommended_formula),
            "tongue_zones": zones,
        },
    }


def build_report_context(result: AnalysisResult | dict, report_date: str | None = None) -> dict:
    """Rapor şablonunun tek girdisi. Sözlük verilirse önce biçim çözülür."""
    if isinstance(result, dict):
        result = parse_analysis_result(result)
    if isinstance(result, TongueAnalysis):
        context = _current_context(result)
    else:
        context = _legacy_context(result)
    context.update(
        {
            "title": REPORT_TITLE,
            "report_date": report_date or datetime.now(timezone.utc).strftime("%d.%m.%Y %H:%M"),
            "zone_map": TONGUE_ZONES,
            "principles": TCM_PRINCIPLES,
        }
    )
    return context


def to_legacy_fields(result: AnalysisResult) -> dict:
    """Dashboard listesinde kullanılan düz kolonlar (her iki biçimden)."""
    if isinstance(result, LegacyTongueAnalysis):
        return {
            "primary_pattern": result.primary_pattern or "",
            "coat": result.coat or "",
            "color": result.color or "",
            "shape": result.shape or "",
            "moisture": result.moisture or "",
            "recommendations": result.recommendations,
            "recommended_formula": result.recommended_formula,
            "severity": result.severity,
        }
    primary = result.pattern_differentiation.primary_pattern
    te = result.tongue_examination
    coating = te.coating if te else None
    body = te.body if te else None
    overall = te.overall_assessment if te else None
    coat = ""
    if coating is not None:
        coat = coating.description or " ".join(x for x in (coating.thickness, coating.color) if x)
    recommended = result.herbal_formula.recommended if result.herbal_formula else None
    return {
        "primary_pattern": primary.name or "",
        "coat": coat,
        "color": (body.color if body else None) or (overall.color if overall else None) or "",
        "shape": (body.shape if body else None) or (overall.shape if overall else None) or "",
        "moisture": (overall.moisture if overall else None) or (coating.moisture if coating else None) or "",
        "recommendations": result.treatment_principles.primary if result.treatment_principles else None,
        "recommended_formula": recommended.name if recommended else None,
        "severity": primary.severity,
    }
