"""System tray interface and embedded icons."""

from __future__ import annotations

import base64
import binascii
import gzip
import zlib
from abc import ABC, abstractmethod

from .config import Config


class TrayManager(ABC):
    """Interface every tray implementation provides."""

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def set_recording_state(self, is_recording: bool) -> None: ...

    @abstractmethod
    def set_tooltip(self, tooltip: str) -> None: ...

    @abstractmethod
    def update_settings(self, config: Config) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...


def decode_icon(encoded: str) -> bytes:
    """Decode a base64-encoded gzip blob; raises ValueError if malformed."""
    try:
        compressed = base64.b64decode("".join(encoded.split()), validate=True)
        return gzip.decompress(compressed)
    except (binascii.Error, OSError, EOFError, zlib.error) as exc:
        raise ValueError(f"failed to decode icon: {exc}") from exc


_ICON_MIC_OFF = """
H4sIAAAAAAAA/3SPweqbMBCF9zzF4P1/c8HgRgSvVIRuuvHFE39GbGuUkdpe+vRFTUIJhZ6BmTPnzAzr
mmqIMLDyxIc5pTX0eCn0CnpK+qj5X+8UPQx8gS+pEvR41PgClQpK1YEL3lqFlmvU7RRCQKdbgUbV9vht
Fa2Ij6p9ROiHp5Hn/q7zFCf0uY7jaE40/XUQsEo3pIVOEUqoQlLdOeE1R8+CL+xPYvv9tJ+uLVJAH0XE
IVfhbFcO4qTZk5M23qXhVDaWLRs4PH0tDKPEv5TXh0NpY1PSzuU1WrDUGYtFt90IXjZYfrIbQ27Bl0KX
oD9Sjy1rNTYNj22rYJcnjtdpOdCbhXbJlW3uMSQx0l4uM9RNd1KwVi1j+YGJpnVa4kNXGFM2aMZZGiYp
l9mAb6mW/TK/AgAA//9MnxM3jgEAAA==
"""

_ICON_MIC_ON = """
H4sIAAAAAAAA/3SOweraQBCG9zzF4PmvveBPJCJXWkI33MQXTzRZsdkaZWSbhjx9MU0ohW56YL7hm38G
pgnVMFqzcHSqD2lKa7RoS/kKLSV1LPJ1J8FgUK95TqVAi8csvqYlclC8VsG8MmjKNch2DiGyLi8ZjODs
+MsJ3hG9KfaI2HfPI89tX+taPqGNdRhGfaLpr4eIRXRHXvKxVDElh2a/HNfkWVVqFfQnse1+2k/XFsmj
JRFxyCM4W8tB7BV9dMpEl4ZThVk1GRg8PJJLRolP22Q6jUqKTUq7PK3RgqVUUm1e7zRfNpg/dLBu3YK9
yExm+JZ6bJnRWDccN0ZwLbpwvE7rgTZLtUupbHPvIYmROsvQQDlpG5U19mPzfp6muO+h3ykpzZRX+wn9
NKtmmj8BAAD//9qlc2+OAQAA
"""


def get_icon_mic_off() -> bytes:
    return decode_icon(_ICON_MIC_OFF)


def get_icon_mic_on() -> bytes:
    return decode_icon(_ICON_MIC_ON)