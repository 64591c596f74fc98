"""FastAPI gateway for DocChat.

RESTful routes that relay to the document store and the language model.

Endpoints:
    - GET /health: Service health status
    - POST /api/upload: File upload (PDF or text, max 100MB)
    - POST /api/upload-text: Named text upload
    - GET /api/files: Paginated file listing
    - POST /api/search: Similarity search within selected files
    - POST /api/ask: Answer generation from supplied context
"""
