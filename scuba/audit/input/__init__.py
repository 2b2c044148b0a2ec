"""Link discovery for audit runs."""

from .link_collector import LinkCollector, SeedLoadError

__all__ = ['LinkCollector', 'SeedLoadError']
