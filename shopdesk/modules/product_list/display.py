"""
Display helpers for the product table.
"""

import re

_ENTITIES = (
    ('&nbsp;', ' '),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&#39;', "'"),
    ('&quot;', '"'),
    ('&amp;', '&'),
)


def html_to_plain_text(html):
    """Strip tags (each becomes a space) and decode the common entities"""
    if not html:
        return ''
    text = re.sub(r'<[^>]*>', ' ', html)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def description_excerpt(html, limit=100):
    text = html_to_plain_text(html)
    if not text:
        return ''
    return text[:limit] + '...'


def format_amount(value, currency='₹'):
    if value is None or value == '':
        return '-'
    try:
        number = float(value)
    except (TypeError, ValueError):
        return f"{currency} {value}"
    if number.is_integer():
        return f"{currency} {int(number):,}"
    return f"{currency} {number:,.2f}"


def category_labels(product, category_map):
    """Names for a product's categories; unknown ids are shown raw"""
    categories = product.get('categories') or []
    if categories:
        return [category_map.get(cat_id, cat_id) for cat_id in categories]
    legacy = product.get('category')
    if isinstance(legacy, dict):
        legacy = legacy.get('_id')
    if legacy:
        return [category_map.get(legacy, legacy)]
    return []
