from .in_memory_totp_replay_guard import InMemoryTotpReplayGuard
from .qrcode_png_renderer import QrcodePngRenderer

__all__ = ["InMemoryTotpReplayGuard", "QrcodePngRenderer"]
