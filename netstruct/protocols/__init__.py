"""
Protocols shipped with the package, installed in the default registry at import.

The order of installation is the order used to guess the first header of
undecoded data: link layer first.
"""
from ..registry import registry
from . import eth, ip, udp, sctp, ike


PROTOCOLS = (eth, ip, udp, sctp, ike)


def install(registry):
    for module in PROTOCOLS:
        module.install(registry)

    return registry


install(registry)
