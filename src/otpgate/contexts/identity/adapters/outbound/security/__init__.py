from .two_factor import InMemoryTotpReplayGuard, QrcodePngRenderer

__all__ = ["InMemoryTotpReplayGuard", "QrcodePngRenderer"]
