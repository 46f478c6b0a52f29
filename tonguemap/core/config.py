from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env proje kökünde: tonguemap/core/config.py -> tonguemap/core -> tonguemap -> kök
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

# Production'da boş bırakılamayacak ayarlar (ortam değişkeni adıyla)
PRODUCTION_REQUIRED = (
    "openai_api_key",
    "secret_key",
    "database_url",
    "stripe_secret_key",
    "stripe_webhook_secret",
    "ga_measurement_id",
    "ga_api_secret",
)
DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    # None: development'ta anahtar yoksa mock sonuç döner, production'da dönmez
    analysis_mock_enabled: bool | None = None
    secret_key: str = DEFAULT_SECRET_KEY
    database_url: str = "sqlite:///./tonguemap.db"
    cors_origins: str = "*"
    # IP başına dakikada max istek (rate limit)
    rate_limit_per_minute: int = 60
    rate_limit_register_per_minute: int = 3
    rate_limit_login_per_minute: int = 5
    environment: str = "development"
    # Stripe yönlendirmelerinde kullanılan site adresi
    app_url: str = "http://localhost:3000"
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_premium_price_id: str = "price_premium_monthly"
    free_scans_per_day: int = 1
    upload_max_mb: int = 10
    # Google Analytics 4 Measurement Protocol; ikisi de boşsa olaylar sadece loglanır
    ga_measurement_id: str = ""
    ga_api_secret: str = ""

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator(
        "openai_api_key",
        "stripe_secret_key",
        "stripe_webhook_secret",
        "ga_measurement_id",
        "ga_api_secret",
        mode="before",
    )
    @classmethod
    def strip_secret(cls, v: str | None) -> str:
        """Boşluk/yanlış kopya kaynaklı hataları azaltır."""
        return (v or "").strip()

    @property
    def is_production(self) -> bool:
        return (self.environment or "").strip().lower() == "production"


settings = Settings()


def is_openai_configured() -> bool:
    return bool(settings.openai_api_key)


def is_stripe_configured() -> bool:
    return bool(settings.stripe_secret_key)


def is_mock_analysis_allowed() -> bool:
    """Anahtar yokken sabit örnek sonuç dönülebilir mi? Açık ayar yoksa production dışı ortamlar."""
    if settings.analysis_mock_enabled is not None:
        return settings.analysis_mock_enabled
    return not settings.is_production


def missing_production_settings() -> list[str]:
    """Production'da zorunlu olup boş kalan ayarların ortam değişkeni adları."""
    missing = []
    for name in PRODUCTION_REQUIRED:
        value = getattr(settings, name, "")
        if not value or (name == "secret_key" and value == DEFAULT_SECRET_KEY):
            missing.append(name.upper())
    return missing
