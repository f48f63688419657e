"""Form definition source: decoding, HTML extraction and remote fetching.

Example:
    >>> from formrender.source import decode
    >>> decode('{"id": "form"}')
    {'id': 'form'}
"""

from .lib import clean_up, decode, extract_form_definition, fetch_form, form_content_url

__all__ = [
    "clean_up",
    "decode",
    "extract_form_definition",
    "form_content_url",
    "fetch_form",
]
