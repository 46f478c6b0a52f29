"""
Dil fotoğrafı analizi: sabit TCM talimatı + görsel OpenAI vision modeline gider, yapılandırılmış JSON döner.

Strateji istek başına bir kez seçilir (select_analyzer):
- Anahtar tanımlı: OpenAIAnalyzer (tek çağrı, tekrar deneme yok).
- Anahtar yok ve mock serbest: MockAnalyzer (sabit tam sonuç).
- Anahtar yok ve mock kapalı (production): 503.
"""
import json
import logging
from datetime import datetime, timezone

from openai import OpenAI

from tonguemap.core.config import is_mock_analysis_allowed, is_openai_configured, settings
from tonguemap.core.errors import AnalysisFailedError, AnalysisFormatError, APIError
from tonguemap.services.image_compression import prepare_image_for_model
from tonguemap.services.mock_analysis import mock_tongue_analysis
from tonguemap.services.prompts import SYSTEM_PROMPT, USER_PROMPT

logger = logging.getLogger(__name__)
OPENAI_TIMEOUT = 60.0
MAX_TOKENS = 4000
TEMPERATURE = 0.3
RESULT_VERSION = "2.0"

_openai_client: OpenAI | None = None


def _get_client() -> OpenAI:
    """Tek OpenAI istemcisi (önbelleklenmiş)."""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAI(api_key=settings.openai_api_key, timeout=OPENAI_TIMEOUT)
    return _openai_client


def stamp_metadata(result: dict, model: str) -> dict:
    """Sürüm, zaman damgası ve model kimliği sunucu tarafında yazılır; modelin verdiği diğer alanlar korunur."""
    metadata = result.get("analysisMetadata")
    metadata = dict(metadata) if isinstance(metadata, dict) else {}
    metadata.update(
        {
            "version": RESULT_VERSION,
            "analysisTimestamp": datetime.now(timezone.utc).isoformat(),
            "model": model,
        }
    )
    return {**result, "analysisMetadata": metadata}


class MockAnalyzer:
    name = "mock"

    def analyze(self, image: str) -> dict:
        logger.warning("OPENAI_API_KEY not set, returning mock analysis")
        return mock_tongue_analysis()


class OpenAIAnalyzer:
    name = "openai"

    def __init__(self, client: OpenAI | None = None, model: str | None = None):
        self.client = client
        self.model = model or settings.openai_model

    def analyze(self, image: str) -> dict:
        image_url = prepare_image_for_model(image)
        client = self.client or _get_client()
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            max_tokens=MAX_TOKENS,
            response_format={"type": "json_object"},
            temperature=TEMPERATURE,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AnalysisFailedError("Model returned empty content")
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse analysis JSON: %s", e)
            raise AnalysisFormatError("Failed to parse response") from e
        if not isinstance(parsed, dict):
            logger.error("Analysis JSON is not an object: %s", type(parsed).__name__)
            raise AnalysisFormatError("Failed to parse response")
        return stamp_metadata(parsed, self.model)


def select_analyzer() -> MockAnalyzer | OpenAIAnalyzer:
    if is_openai_configured():
        return OpenAIAnalyzer()
    if is_mock_analysis_allowed():
        return MockAnalyzer()
    raise APIError("Analysis service is not configured", status_code=503)
