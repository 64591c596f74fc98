"""DocChat - ask questions about uploaded documents.

Relays uploads and questions to a hosted document store and a hosted
language model, and drives the search-then-generate cycle from the UI.

Components:
    - api: FastAPI gateway routes under /api
    - upstream: HTTP clients for the document store and the language model
    - gateway: validation and error normalization around upstream calls
    - client: HTTP client for the gateway routes
    - session: view state and the question/answer flow
    - ui: NiceGUI page for uploads, file selection and chat
    - models: Request/response schemas
"""

__version__ = "0.1.0"
