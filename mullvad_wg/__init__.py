"""WireGuard session manager for Mullvad relays."""

__version__ = "0.3.0"
