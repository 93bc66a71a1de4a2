"""
Domain name splitting.

The last two labels of a domain form the zone delegated to the provider;
everything before them is the host record to update.
"""

from __future__ import annotations

from ddns_updater.errors import DomainError

# Number of trailing labels forming the zone
ZONE_LABELS = 2


def split_domain(domain: str) -> tuple[str, str]:
    """
    Split a fully qualified domain name into zone and subdomain.

    Label syntax is not validated; any string with at least three
    dot-separated labels is accepted.

    Parameters
    ----------
    domain : str
        The domain to split (e.g., "home.example.com").

    Returns
    -------
    tuple[str, str]
        A tuple of `(zone, subdomain)`, e.g. `("example.com", "home")`.

    Raises
    ------
    DomainError
        If the domain has fewer than three labels.
    """
    labels = domain.split(".")
    if len(labels) <= ZONE_LABELS:
        msg = f'Too few domain labels in "{domain}".'
        raise DomainError(msg)

    zone = ".".join(labels[-ZONE_LABELS:])
    subdomain = ".".join(labels[:-ZONE_LABELS])
    return zone, subdomain
