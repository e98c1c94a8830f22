"""User-facing message catalogue for SEO Scout (English and Turkish)."""

from __future__ import annotations

from typing import Dict, Final

DEFAULT_LANG: Final[str] = "en"

MESSAGES: Final[Dict[str, Dict[str, str]]] = {
    "en": {
        "turnstile_failed": "Verification failed. Please try again.",
        "rate_limited": "Too many requests. Please try again later.",
        "invalid_url": "Invalid URL. Provide an http/https URL.",
        "blocked_ssrf": "This URL was blocked for security reasons.",
        "audit_started": "Audit started.",
        "audit_done": "Audit completed.",
        "server_error": "Internal server error.",
        "lead_saved": "Your lead info saved. Full report is ready.",
    },
    "tr": {
        "turnstile_failed": "Doğrulama başarısız. Lütfen tekrar deneyin.",
        "rate_limited": "Çok fazla istek gönderildi. Lütfen daha sonra tekrar deneyin.",
        "invalid_url": "Geçersiz URL. http/https ile başlayan bir adres girin.",
        "blocked_ssrf": "Bu URL güvenlik nedeniyle engellendi.",
        "audit_started": "Denetim başlatıldı.",
        "audit_done": "Denetim tamamlandı.",
        "server_error": "Sunucu hatası oluştu.",
        "lead_saved": "Bilgileriniz kaydedildi. Detaylı rapor hazır.",
    },
}


def get_message(lang: str | None, key: str) -> str:
    """Return the text for *key* in *lang*, falling back to English."""
    catalogue = MESSAGES.get(lang or DEFAULT_LANG, MESSAGES[DEFAULT_LANG])
    try:
        return catalogue.get(key) or MESSAGES[DEFAULT_LANG][key]
    except KeyError:
        raise KeyError(f"Unknown message key: {key}") from None


def supported_languages() -> list[str]:
    return sorted(MESSAGES)


__all__ = ["DEFAULT_LANG", "MESSAGES", "get_message", "supported_languages"]
