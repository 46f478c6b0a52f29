"""
Analiz sonucu şeması: iki tarihsel biçim.

- Güncel (v2): iç içe, `patternDifferentiation` alanı var.
- Eski (legacy): düz alanlar (primaryPattern, coat, color, ...), eski kayıtlar için.

JSON sözleşmesi camelCase; Python tarafında snake_case alanlar alias ile eşlenir.
Bütün bölümler opsiyoneldir: eksik alan hata değil, "gösterilecek bir şey yok" demektir.
"""
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

CURRENT_FORMAT_KEY = "patternDifferentiation"
ZONE_KEYS = ("tip", "center", "sides", "root")


def _clamp_confidence(v: Any) -> float | None:
    """Güven değerlerini [0, 1] aralığına sıkıştırır; sayı değilse None."""
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    if f != f:  # NaN
        return None
    return min(1.0, max(0.0, f))


def _str_list(v: Any) -> list[str]:
    """Model bazen liste yerine tek metin ya da null döndürür."""
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    if isinstance(v, (list, tuple)):
        return [str(x) for x in v if x is not None and str(x).strip()]
    return [str(v)]


def _opt_str(v: Any) -> str | None:
    if v is None:
        return None
    return v if isinstance(v, str) else str(v)


def _model_list(v: Any) -> list:
    """null ya da liste olmayan değer: boş liste; null elemanlar atlanır."""
    if not isinstance(v, (list, tuple)):
        return []
    return [x for x in v if x is not None]


def _obj(v: Any) -> Any:
    """null alt nesne: varsayılan (boş) nesne."""
    return {} if v is None else v


Confidence = Annotated[float | None, BeforeValidator(_clamp_confidence)]
StrList = Annotated[list[str], BeforeValidator(_str_list)]
OptStr = Annotated[str | None, BeforeValidator(_opt_str)]


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class AnalysisMetadata(_Model):
    version: OptStr = None
    confidence: OptStr = None  # high | medium | low
    image_quality: OptStr = None  # excellent | good | fair | poor
    analysis_timestamp: OptStr = None
    model: OptStr = None


class PrincipleAssessment(_Model):
    classification: OptStr = None
    confidence: Confidence = None
    evidence: StrList = Field(default_factory=list)


class EightPrinciples(_Model):
    exterior_interior: PrincipleAssessment | None = None
    hot_cold: PrincipleAssessment | None = None
    excess_deficiency: PrincipleAssessment | None = None
    yin_yang: PrincipleAssessment | None = None


class OrganFinding(_Model):
    organ: OptStr = None
    pathology: OptStr = None
    confidence: Confidence = None


class ZangFuDiagnosis(_Model):
    primary_organ: OrganFinding | None = None
    secondary_organs: Annotated[list[OrganFinding], BeforeValidator(_model_list)] = Field(default_factory=list)


class Pattern(_Model):
    name: OptStr = None
    chinese_name: OptStr = None
    chinese_characters: OptStr = None
    confidence: Confidence = None
    severity: OptStr = None
    evidence: StrList = Field(default_factory=list)
    clinical_manifestations: StrList = Field(default_factory=list)
    relationship_to_primary: OptStr = None


class DifferentialEntry(_Model):
    pattern: OptStr = None
    ruling_factor: OptStr = None


class PatternDifferentiation(_Model):
    primary_pattern: Annotated[Pattern, BeforeValidator(_obj)] = Field(default_factory=Pattern)
    secondary_patterns: Annotated[list[Pattern], BeforeValidator(_model_list)] = Field(default_factory=list)
    differential_diagnosis: Annotated[list[DifferentialEntry], BeforeValidator(_model_list)] = Field(default_factory=list)


class OverallAssessment(_Model):
    color: OptStr = None
    shape: OptStr = None
    moisture: OptStr = None
    movement: OptStr = None


class Coating(_Model):
    color: OptStr = None
    color_confidence: Confidence = None
    thickness: OptStr = None
    thickness_confidence: Confidence = None
    moisture: OptStr = None
    moisture_confidence: Confidence = None
    distribution: OptStr = None
    rooted: OptStr = None
    description: OptStr = None


class BodyFeature(_Model):
    type: OptStr = None
    location: OptStr = None
    description: OptStr = None


class TongueBody(_Model):
    color: OptStr = None
    color_confidence: Confidence = None
    shape: OptStr = None
    shape_confidence: Confidence = None
    features: Annotated[list[BodyFeature], BeforeValidator(_model_list)] = Field(default_factory=list)
    description: OptStr = None


class ZoneFinding(_Model):
    description: OptStr = None
    organ_correlation: OptStr = None
    findings: StrList = Field(default_factory=list)


class TongueZones(BaseModel):
    """Her zaman tam olarak dört bölge: tip, center, sides, root. Başka anahtar kabul edilmez."""

    model_config = ConfigDict(extra="ignore")

    tip: Annotated[ZoneFinding, BeforeValidator(_obj)] = Field(default_factory=ZoneFinding)
    center: Annotated[ZoneFinding, BeforeValidator(_obj)] = Field(default_factory=ZoneFinding)
    sides: Annotated[ZoneFinding, BeforeValidator(_obj)] = Field(default_factory=ZoneFinding)
    root: Annotated[ZoneFinding, BeforeValidator(_obj)] = Field(default_factory=ZoneFinding)


class TongueExamination(_Model):
    overall_assessment: OverallAssessment | None = None
    coating: Coating | None = None
    body: TongueBody | None = None
    zones: Annotated[TongueZones, BeforeValidator(_obj)] = Field(default_factory=TongueZones)


class TreatmentPrinciples(_Model):
    primary: OptStr = None
    secondary: StrList = Field(default_factory=list)
    contraindications: StrList = Field(default_factory=list)


class FormulaRecommendation(_Model):
    name: OptStr = None
    chinese_name: OptStr = None
    chinese_characters: OptStr = None
    confidence: Confidence = None
    rationale: OptStr = None


class FormulaModification(_Model):
    condition: OptStr = None
    add: StrList = Field(default_factory=list)
    remove: StrList = Field(default_factory=list)


class FormulaAlternative(_Model):
    name: OptStr = None
    when_to_use: OptStr = None


class HerbalFormula(_Model):
    recommended: FormulaRecommendation | None = None
    modifications: Annotated[list[FormulaModification], BeforeValidator(_model_list)] = Field(default_factory=list)
    alternatives: Annotated[list[FormulaAlternative], BeforeValidator(_model_list)] = Field(default_factory=list)


class AcupuncturePoint(_Model):
    point: OptStr = None
    location: OptStr = None
    technique: OptStr = None  # reinforcing | reducing | even
    rationale: OptStr = None


class SupplementaryPoint(_Model):
    point: OptStr = None
    indication: OptStr = None


class Moxibustion(_Model):
    recommended: bool | None = None
    points: StrList = Field(default_factory=list)
    rationale: OptStr = None


class Acupuncture(_Model):
    primary_points: Annotated[list[AcupuncturePoint], BeforeValidator(_model_list)] = Field(default_factory=list)
    supplementary_points: Annotated[list[SupplementaryPoint], BeforeValidator(_model_list)] = Field(default_factory=list)
    moxibustion: Moxibustion | None = None


class Diet(_Model):
    general: OptStr = None
    foods_to_emphasize: StrList = Field(default_factory=list)
    foods_to_avoid: StrList = Field(default_factory=list)
    eating_habits: StrList = Field(default_factory=list)


class Exercise(_Model):
    recommended_types: StrList = Field(default_factory=list)
    intensity: OptStr = None
    timing: OptStr = None
    cautions: StrList = Field(default_factory=list)


class EmotionalHealth(_Model):
    relevant_emotions: StrList = Field(default_factory=list)
    recommendations: StrList = Field(default_factory=list)


class Sleep(_Model):
    recommendations: StrList = Field(default_factory=list)
    ideal_hours: OptStr = None


class DailyRoutine(_Model):
    morning: StrList = Field(default_factory=list)
    evening: StrList = Field(default_factory=list)


class LifestyleRecommendations(_Model):
    diet: Diet | None = None
    exercise: Exercise | None = None
    emotional_health: EmotionalHealth | None = None
    sleep: Sleep | None = None
    daily_routine: DailyRoutine | None = None


class Prognosis(_Model):
    expected_recovery_time: OptStr = None
    factors_affecting_recovery: StrList = Field(default_factory=list)
    warning_signs: StrList = Field(default_factory=list)


class FollowUp(_Model):
    recommended_timeline: OptStr = None
    expected_changes: StrList = Field(default_factory=list)
    tongue_changes: StrList = Field(default_factory=list)


class TongueAnalysis(_Model):
    """Güncel (v2) sonuç. `pattern_differentiation` ayırt edici alandır."""

    analysis_metadata: AnalysisMetadata | None = None
    eight_principles: EightPrinciples | None = None
    zang_fu_diagnosis: ZangFuDiagnosis | None = None
    pattern_differentiation: PatternDifferentiation = Field(default_factory=PatternDifferentiation)
    tongue_examination: TongueExamination | None = None
    treatment_principles: TreatmentPrinciples | None = None
    herbal_formula: HerbalFormula | None = None
    acupuncture: Acupuncture | None = None
    lifestyle_recommendations: LifestyleRecommendations | None = None
    prognosis: Prognosis | None = None
    follow_up: FollowUp | None = None


class LegacyTongueZones(_Model):
    tip: OptStr = None
    center: OptStr = None
    root: OptStr = None
    sides: OptStr = None


class LegacyTongueAnalysis(_Model):
    """Eski düz sonuç biçimi; kayıtlı eski taramalar bu şekilde gelir."""

    primary_pattern: OptStr = None
    secondary_patterns: StrList = Field(default_factory=list)
    coat: OptStr = None
    color: OptStr = None
    shape: OptStr = None
    moisture: OptStr = None
    recommendations: OptStr = None
    recommended_formula: OptStr = None
    severity: OptStr = None  # mild | moderate | significant
    tongue_zones: LegacyTongueZones | None = None


AnalysisResult = TongueAnalysis | LegacyTongueAnalysis


def is_current_format(data: dict) -> bool:
    return isinstance(data, dict) and CURRENT_FORMAT_KEY in data


def parse_analysis_result(data: dict) -> AnalysisResult:
    """Biçim kararı burada bir kez verilir; sonraki okuyucular tipe göre dallanır."""
    if not isinstance(data, dict):
        raise ValueError("Analysis result must be a JSON object.")
    if is_current_format(data):
        payload = dict(data)
        if not isinstance(payload.get(CURRENT_FORMAT_KEY), dict):
            payload[CURRENT_FORMAT_KEY] = {}
        return TongueAnalysis.model_validate(payload)
    return LegacyTongueAnalysis.model_validate(data)


def dump_analysis(result: AnalysisResult) -> dict:
    """API'ye dönen camelCase JSON (None alanlar atlanır)."""
    return result.model_dump(by_alias=True, exclude_none=True)


class AnalyzeRequest(BaseModel):
    image: str | None = None  # data URL: data:image/jpeg;base64,...
