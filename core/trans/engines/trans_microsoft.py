"""Microsoft Translator (Azure AI Translator) v3 adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from core.trans.engines.http_base import HttpTranslation

if TYPE_CHECKING:
    from config.loader import Config

__all__: list[str] = ["MicrosoftTranslation"]

API_VERSION: Final[str] = "3.0"
# Microsoft uses script-qualified codes for Chinese.
LANGUAGE_CODE_MAP: Final[dict[str, str]] = {
    "zh": "zh-Hans",
    "zh-cn": "zh-Hans",
    "zh-tw": "zh-Hant",
}


class MicrosoftTranslation(HttpTranslation):
    """POST ``/translate?api-version=3.0`` with the key in ``Ocp-Apim-Subscription-Key``."""

    def __init__(self) -> None:
        super().__init__()
        self.url: str = ""
        self.region: str = ""

    @staticmethod
    def fetch_engine_name() -> str:
        return "microsoft"

    def configure(self, config: Config) -> None:
        self.url = config.PROVIDERS.MICROSOFT_URL
        self.region = config.PROVIDERS.MICROSOFT_REGION

    @staticmethod
    def map_language(code: str) -> str:
        return LANGUAGE_CODE_MAP.get(code.lower(), code.lower())

    async def _send(self, content: str, tgt_lang: str, src_lang: str | None) -> Any:
        params: dict[str, str] = {"api-version": API_VERSION, "to": self.map_language(tgt_lang)}
        if src_lang:
            params["from"] = self.map_language(src_lang)

        headers: dict[str, str] = {"Ocp-Apim-Subscription-Key": self.get_authentication_key()}
        if self.region:
            headers["Ocp-Apim-Subscription-Region"] = self.region

        return await self.http.post(
            url=self.url,
            params=params,
            data=[{"text": content}],
            headers=headers,
            total_timeout=self.timeout,
        )

    def _extract(self, payload: Any) -> str:
        # [{"translations": [{"text": "...", "to": "fr"}]}]
        return payload[0]["translations"][0]["text"]
