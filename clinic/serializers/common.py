import html

import bleach
from rest_framework import serializers
from rest_framework.fields import empty


def clean_text(v):
    """Strip all tags and surrounding whitespace; empty text becomes None.

    bleach escapes ``&``, ``<`` and ``>`` in what it keeps, so the result
    is unescaped again and stored as plain text.
    """
    if v is None:
        return None
    v = html.unescape(bleach.clean(str(v), tags=set(), attributes={}, strip=True)).strip()
    return v or None


class CleanCharField(serializers.CharField):
    """Optional CharField whose value is tag-stripped; blank input yields None."""

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_blank', True)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def run_validation(self, data=empty):
        return clean_text(super().run_validation(data))
