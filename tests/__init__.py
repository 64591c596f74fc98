"""Test package for DocChat.

Structure:
    - unit/: Individual function and class tests
    - integration/: Routes and full question cycles through the ASGI app

The document store and language model are always simulated with
httpx.MockTransport (see fakes.py); no test needs network access or keys.
Leverages pytest with pytest-check for soft assertions.
"""
