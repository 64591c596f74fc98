"""NiceGUI interface - thin visualization layer over the session logic.

Responsibilities:
    - Document upload (PDF or text)
    - File list with selection, duplicate marking and Load More
    - Chat transcript with search/generate status

Holds no business logic of its own. State and the question cycle live
in docchat.session; all network access goes through docchat.client.
"""
