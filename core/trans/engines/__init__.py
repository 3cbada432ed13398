"""Translation provider adapters.

This package contains concrete implementations of TransInterface for the supported vendors.
Importing it registers every adapter with ``TransInterface.registered``.

Modules:
- DeeplTranslation: DeepL, through the official SDK.
- GoogleCloudTranslation: Google Cloud Translation v2, through google-cloud-translate.
- MicrosoftTranslation: Microsoft Translator v3 REST API.
- LibreTranslation: LibreTranslate REST API.
"""

from core.trans.engines.http_base import HttpTranslation
from core.trans.engines.trans_deepl import DeeplTranslation
from core.trans.engines.trans_google_cloud import GoogleCloudTranslation
from core.trans.engines.trans_libre import LibreTranslation
from core.trans.engines.trans_microsoft import MicrosoftTranslation

__all__: list[str] = [
    "DeeplTranslation",
    "GoogleCloudTranslation",
    "HttpTranslation",
    "LibreTranslation",
    "MicrosoftTranslation",
]
