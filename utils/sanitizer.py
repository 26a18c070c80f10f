"""
Input Sanitization Module

Cleans names and free text received through the API before storage.
"""

import html
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_text(text, max_length=200):
    """
    Sanitize text by HTML-escaping special characters.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 200)

    Returns:
        Sanitized string, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = _CONTROL_CHARS.sub('', text.strip())
    text = html.escape(text)

    if len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_name(name, max_length=100):
    """
    Sanitize an ingredient, product or fixed cost name.

    Collapses whitespace; returns '' when nothing usable is left so the
    caller can reject the request.
    """
    name = sanitize_text(name, max_length=max_length * 2)
    name = re.sub(r'\s+', ' ', name)
    if len(name) > max_length:
        name = name[:max_length-3] + '...'
    return name
