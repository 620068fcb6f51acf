import re

_DISALLOWED = re.compile(r'[^\w\s-]', re.ASCII)
_WHITESPACE = re.compile(r'\s+')
_HYPHENS = re.compile(r'-+')


def slugify(name):
    """Derive the URL slug from a product name.

    >>> slugify("Men's T-Shirt!!  2.0")
    'mens-t-shirt-20'
    """
    slug = (name or '').lower().strip()
    slug = _DISALLOWED.sub('', slug)
    slug = _WHITESPACE.sub('-', slug)
    slug = _HYPHENS.sub('-', slug)
    return slug.strip('-')
