"""
DDNS Updater - A one-shot dynamic DNS updater.

This package discovers the caller's public IPv4 and IPv6 addresses and
writes them as A/AAAA records to CloudFlare DNS.
"""

__version__ = "0.1.0"
__author__ = "DDNS Updater Contributors"
