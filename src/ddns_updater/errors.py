"""
Exceptions raised by the update pipeline.

Every stage raises one of these; only the CLI decides how the process exits.
"""

from __future__ import annotations


class DDNSError(Exception):
    """Base class for all update pipeline errors."""


class InputError(DDNSError):
    """Invalid user input (domain argument)."""


class DomainError(InputError):
    """The domain cannot be split into zone and subdomain."""


class DiscoveryError(DDNSError):
    """Public address discovery failed."""


class UnsupportedRecordTypeError(DiscoveryError):
    """Address discovery was asked for a record type other than A or AAAA."""


class DiscoveryTransportError(DiscoveryError):
    """The trace endpoint could not be reached or answered with an error status."""


class AddressNotFoundError(DiscoveryError):
    """The trace response contains no ``ip=`` line."""


class AddressParseError(DiscoveryError):
    """
    The ``ip=`` value is not a usable address.

    Raised both for malformed literals and for an address of the wrong
    family (e.g. an IPv6 literal returned to the IPv4 probe).
    """


class ProviderError(DDNSError):
    """The DNS provider rejected or failed the update."""


class DeadlineExceededError(DDNSError):
    """The whole update run did not finish within its deadline."""
