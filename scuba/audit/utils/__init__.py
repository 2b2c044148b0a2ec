"""Audit utilities package."""

from .url_normalizer import (
    normalize,
    normalize_link,
    get_origin,
    strip_origin,
    is_valid_http_url,
    URLNormalizationError,
)
from .scope_matcher import OriginScope, ScopeMatcherError, create_scope_from_config

__all__ = [
    'normalize',
    'normalize_link',
    'get_origin',
    'strip_origin',
    'is_valid_http_url',
    'URLNormalizationError',
    'OriginScope',
    'ScopeMatcherError',
    'create_scope_from_config',
]
