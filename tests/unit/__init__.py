"""Unit tests for individual components in isolation.

Coverage:
    - config/errors: Settings loading and the error taxonomy
    - gateway: Input validation, upstream error translation, upload cleanup
    - session: Selection, transcript, file paging, question flow, formatting
"""
