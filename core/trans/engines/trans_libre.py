"""LibreTranslate adapter.

LibreTranslate is the free provider: it works without a key, so it is never skipped for missing
credentials. An optional key is sent when ``LIBRE_API_OAUTH`` is set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from core.trans.engines.http_base import HttpTranslation
from utils.string_utils import AUTO_LANGUAGE

if TYPE_CHECKING:
    from config.loader import Config

__all__: list[str] = ["LibreTranslation"]


class LibreTranslation(HttpTranslation):
    requires_credentials: ClassVar[bool] = False

    def __init__(self) -> None:
        super().__init__()
        self.url: str = ""

    @staticmethod
    def fetch_engine_name() -> str:
        return "libre"

    def configure(self, config: Config) -> None:
        self.url = config.PROVIDERS.LIBRE_URL

    async def _send(self, content: str, tgt_lang: str, src_lang: str | None) -> Any:
        body: dict[str, str] = {
            "q": content,
            "source": src_lang or AUTO_LANGUAGE,
            "target": tgt_lang,
            "format": "text",
        }
        api_key: str = self.get_authentication_key()
        if api_key:
            body["api_key"] = api_key
        return await self.http.post(url=self.url, data=body, total_timeout=self.timeout)

    def _extract(self, payload: Any) -> str:
        return payload["translatedText"]
