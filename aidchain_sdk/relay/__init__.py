"""
Sponsor relay: a stateless backend holding the sponsor provider credential.

Requires the ``relay`` extra:
    pip install aidchain-sdk[relay]
"""
from .enoki import EnokiClient
from .service import ExecutionRelay, SponsorProvider, SponsorRelay

__all__ = ["EnokiClient", "ExecutionRelay", "SponsorProvider", "SponsorRelay", "create_app"]


def create_app(*args, **kwargs):
    """Create the Flask relay application (see :func:`aidchain_sdk.relay.app.create_app`)."""
    from .app import create_app as _create_app
    return _create_app(*args, **kwargs)
