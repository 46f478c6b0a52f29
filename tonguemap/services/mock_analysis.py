"""Model anahtarı yokken (geliştirme/test) dönen sabit, tam doldurulmuş v2 sonuç."""
import copy
from datetime import datetime, timezone

_MOCK_RESULT = {
    "analysisMetadata": {
        "version": "2.0",
        "confidence": "high",
        "imageQuality": "good",
    },
    "eightPrinciples": {
        "exteriorInterior": {
            "classification": "interior",
            "confidence": 0.85,
            "evidence": ["Tongue changes are pronounced and indicate internal organ involvement"],
        },
        "hotCold": {
            "classification": "cold",
            "confidence": 0.80,
            "evidence": ["Pale tongue color indicates yang deficiency/cold"],
        },
        "excessDeficiency": {
            "classification": "deficiency",
            "confidence": 0.90,
            "evidence": ["Teeth marks", "Pale color", "Swollen body"],
        },
        "yinYang": {
            "classification": "yang",
            "confidence": 0.75,
            "evidence": ["Spleen yang deficiency pattern dominant"],
        },
    },
    "zangFuDiagnosis": {
        "primaryOrgan": {"organ": "spleen", "pathology": "qi_deficiency", "confidence": 0.92},
        "secondaryOrgans": [{"organ": "stomach", "pathology": "yang_deficiency", "confidence": 0.70}],
    },
    "patternDifferentiation": {
        "primaryPattern": {
            "name": "Spleen Qi Deficiency with Dampness",
            "chineseName": "Pi Qi Xu Yu Shi",
            "chineseCharacters": "脾气虚夹湿",
            "confidence": 0.88,
            "severity": "moderate",
            "evidence": [
                "Pale tongue body indicating qi deficiency",
                "Teeth marks on sides indicating spleen qi deficiency",
                "Swollen tongue body indicating dampness retention",
                "White coating indicating cold/dampness",
            ],
            "clinicalManifestations": [
                "Fatigue, especially after eating",
                "Poor appetite",
                "Loose stools or diarrhea",
                "Heaviness in limbs",
                "Bloating after meals",
            ],
        },
        "secondaryPatterns": [
            {
                "name": "Mild Qi Sinking",
                "chineseName": "Qi Xia Xian",
                "chineseCharacters": "气下陷",
                "confidence": 0.60,
                "relationshipToPrimary": "consequence",
            }
        ],
        "differentialDiagnosis": [
            {
                "pattern": "Spleen Yang Deficiency",
                "rulingFactor": "Lacks the cold signs (very pale wet tongue, cold limbs) typical of yang deficiency",
            }
        ],
    },
    "tongueExamination": {
        "overallAssessment": {
            "color": "Pale pink indicating qi deficiency",
            "shape": "Swollen with visible teeth marks",
            "moisture": "Normal to slightly wet",
            "movement": "normal",
        },
        "coating": {
            "color": "white",
            "colorConfidence": 0.90,
            "thickness": "thin",
            "thicknessConfidence": 0.85,
            "moisture": "normal",
            "moistureConfidence": 0.80,
            "distribution": "even",
            "rooted": "rooted",
            "description": "Thin white coating evenly distributed, indicating stomach qi is present and prognosis is good",
        },
        "body": {
            "color": "pale",
            "colorConfidence": 0.88,
            "shape": "swollen",
            "shapeConfidence": 0.90,
            "features": [
                {"type": "teeth_marks", "location": "sides", "description": "Clear scalloped edges on both sides"}
            ],
            "description": "Swollen pale body with distinct teeth marks indicating spleen qi deficiency with dampness",
        },
        "zones": {
            "tip": {
                "description": "Normal color, slight paleness",
                "organCorrelation": "Heart/Lungs",
                "findings": ["No significant abnormalities", "Heart/lung function relatively balanced"],
            },
            "center": {
                "description": "Slightly pale with coating",
                "organCorrelation": "Spleen/Stomach",
                "findings": ["Central area pale", "Indicates digestive weakness"],
            },
            "sides": {
                "description": "Prominent teeth marks visible",
                "organCorrelation": "Liver/Gallbladder",
                "findings": ["Clear scalloping from teeth pressure", "Spleen deficiency affecting liver"],
            },
            "root": {
                "description": "Normal appearance",
                "organCorrelation": "Kidneys/Bladder",
                "findings": ["Kidney essence appears adequate"],
            },
        },
    },
    "treatmentPrinciples": {
        "primary": "Tonify Spleen Qi and resolve dampness",
        "secondary": ["Strengthen transformation and transportation function"],
        "contraindications": ["Avoid cold and raw foods", "Avoid excessive mental work"],
    },
    "herbalFormula": {
        "recommended": {
            "name": "Si Jun Zi Tang combined with Er Chen Tang",
            "chineseName": "Si Jun Zi Tang Jia Er Chen Tang",
            "chineseCharacters": "四君子汤合二陈汤",
            "confidence": 0.85,
            "rationale": "Four Gentlemen tonifies spleen qi while Two Aged Herbs resolves dampness and transforms phlegm",
        },
        "modifications": [
            {
                "condition": "If severe bloating present",
                "add": ["Sha Ren (Cardamom)", "Mu Xiang (Aucklandia)"],
                "remove": [],
            }
        ],
        "alternatives": [{"name": "Liu Jun Zi Tang", "whenToUse": "If nausea or vomiting present"}],
    },
    "acupuncture": {
        "primaryPoints": [
            {
                "point": "ST36 (Zu San Li)",
                "location": "Below knee on stomach channel",
                "technique": "reinforcing",
                "rationale": "Sea point - powerfully tonifies spleen and stomach qi",
            },
            {
                "point": "SP6 (San Yin Jiao)",
                "location": "Inner ankle above medial malleolus",
                "technique": "reinforcing",
                "rationale": "Tonifies spleen and resolves dampness",
            },
        ],
        "supplementaryPoints": [],
        "moxibustion": {
            "recommended": True,
            "points": ["BL20 (Pi Shu)", "CV12 (Zhong Wan)"],
            "rationale": "Warm yang and strongly tonify spleen",
        },
    },
    "lifestyleRecommendations": {
        "diet": {
            "general": "Warm, cooked, easily digestible foods",
            "foodsToEmphasize": ["Congee", "Steamed vegetables", "Warm soups", "Ginger", "Pumpkin"],
            "foodsToAvoid": ["Cold drinks", "Raw vegetables", "Dairy", "Greasy foods", "Sugar"],
            "eatingHabits": ["Regular meal times", "Eat breakfast", "Stop at 80% full", "Chew thoroughly"],
        },
        "exercise": {
            "recommendedTypes": ["Walking", "Tai Chi", "Qigong"],
            "intensity": "gentle",
            "timing": "Morning is best",
            "cautions": ["Avoid over-exertion", "Don't exercise on full stomach"],
        },
        "emotionalHealth": {
            "relevantEmotions": ["Worry", "Overthinking"],
            "recommendations": ["Meditation", "Limit mental work", "Practice mindfulness"],
        },
        "sleep": {
            "recommendations": ["Early to bed (before 11pm)", "Avoid screens before bed"],
            "idealHours": "8 hours",
        },
        "dailyRoutine": {
            "morning": ["Warm water with ginger", "Light breakfast"],
            "evening": ["Light dinner", "Early bedtime"],
        },
    },
    "prognosis": {
        "expectedRecoveryTime": "2-3 months with consistent treatment",
        "factorsAffectingRecovery": [
            "Dietary compliance is crucial",
            "Stress management helps significantly",
        ],
        "warningSigns": ["Persistent diarrhea", "Severe fatigue", "Weight loss"],
    },
    "followUp": {
        "recommendedTimeline": "Weekly for 4 weeks, then bi-weekly",
        "expectedChanges": ["Increased energy", "Better digestion", "Less bloating"],
        "tongueChanges": ["Teeth marks should fade", "Color should become pinker"],
    },
}


def mock_tongue_analysis() -> dict:
    """Her çağrıda bağımsız kopya; zaman damgası o anın UTC zamanı."""
    result = copy.deepcopy(_MOCK_RESULT)
    result["analysisMetadata"]["analysisTimestamp"] = datetime.now(timezone.utc).isoformat()
    return result
