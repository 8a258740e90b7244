"""Email channel factory.

Provides get_email_channel() / set_email_channel() to swap implementations.
Defaults to FakeEmailAdapter; a real provider adapter is configured at
startup in production.
"""

from storefront.notifications.email_port import EmailPort
from storefront.notifications.fake_email import FakeEmailAdapter

_current_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the current email channel. Defaults to FakeEmailAdapter."""
    global _current_channel
    if _current_channel is None:
        _current_channel = FakeEmailAdapter()
    return _current_channel


def set_email_channel(channel: EmailPort) -> None:
    """Override the active email channel (useful for tests)."""
    global _current_channel
    _current_channel = channel


def reset_email_channel() -> None:
    """Reset to the default email channel."""
    global _current_channel
    _current_channel = None
