"""DNS provider clients."""

from ddns_updater.providers.base import BaseDNSProvider, ProviderResult
from ddns_updater.providers.cloudflare import CloudFlareProvider

__all__ = ["BaseDNSProvider", "CloudFlareProvider", "ProviderResult"]
