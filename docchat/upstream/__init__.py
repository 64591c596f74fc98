"""HTTP clients for the two hosted services the gateway relays to.

Clients:
    - DocumentStoreClient: uploads, file listing and similarity search
    - LanguageModelClient: chat completions
"""

from docchat.upstream.document_store import DocumentStoreClient
from docchat.upstream.language_model import LanguageModelClient

__all__ = ["DocumentStoreClient", "LanguageModelClient"]
