"""Uygulama hataları: route'lar fırlatır, main.py'deki handler {"error", "details"?} gövdesine çevirir."""


class APIError(Exception):
    """İstemciye dönecek hata; details yalnızca güvenli olduğunda doldurulur."""

    def __init__(self, message: str, status_code: int = 500, details: str | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class AnalysisFormatError(Exception):
    """Model yanıtı geçerli bir JSON nesnesi değil."""


class AnalysisFailedError(Exception):
    """Model boş içerik döndü."""


class WebhookSignatureError(Exception):
    """Stripe imzası eksik veya doğrulanamadı."""
