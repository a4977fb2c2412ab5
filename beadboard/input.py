"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, navigation keys, and control-key combos.
"""

from __future__ import annotations

import codecs
import os
import select

from .errors import InputError

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []
_MAX_CSI_BYTES = 64

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x02": "CTRL_B",
    b"\x03": "CTRL_C",
    b"\x06": "CTRL_F",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\x15": "CTRL_U",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"7": "HOME",
    b"4": "END",
    b"8": "END",
    b"3": "DELETE",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_char(fd: int, first: bytes) -> str:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        text = decoder.decode(first)
        while not text:
            nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                raise InputError(f"truncated UTF-8 sequence starting with {first!r}")
            text = decoder.decode(nxt)
    except UnicodeDecodeError as exc:
        raise InputError(f"invalid UTF-8 input starting with {first!r}") from exc
    return text


def _read_csi(fd: int) -> str:
    """Decode the remainder of an ``ESC [`` sequence.

    Parameter and intermediate bytes (0x20-0x3F) are consumed up to the final
    byte (0x40-0x7E) even when the sequence turns out to be unsupported, so a
    mouse or focus report never leaks its tail into later keys.
    """
    params = b""
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            if not params:
                return "ESC"
            raise InputError(f"truncated escape sequence: ESC [{params!r}")
        if 0x20 <= part[0] <= 0x3F:
            if len(params) >= _MAX_CSI_BYTES:
                raise InputError("escape sequence too long")
            params += part
            continue
        break

    if not 0x40 <= part[0] <= 0x7E:
        raise InputError(f"malformed escape sequence: ESC [{params!r}{part!r}")
    if params.strip(b"0123456789;"):
        raise InputError(f"unsupported escape sequence: ESC [{params!r}{part!r}")
    if part == b"~":
        key = _CSI_TILDE_KEYS.get(params.split(b";", 1)[0])
        if key is None:
            raise InputError(f"unsupported escape sequence: ESC [{params.decode('ascii')}~")
        return key
    key = _CSI_FINAL_KEYS.get(part)
    if key is None:
        raise InputError(f"unsupported escape sequence: ESC [{params.decode('ascii')}{part!r}")
    return key
    key = _CSI_FINAL_KEYS.get(part)
    if key is None:
        raise InputError(f"unsupported escape sequence: ESC [{params.decode('ascii')}{part!r}")
    return key


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, or ``""`` when nothing arrived within ``timeout_ms``.

    Raises :class:`InputError` for sequences that cannot be decoded; the
    runtime loop drops those.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _read_utf8_char(fd, ch)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        # SS3 form used by some terminals for arrows and Home/End.
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        key = _CSI_FINAL_KEYS.get(final)
        if key is None:
            raise InputError(f"unsupported escape sequence: ESC O{final!r}")
        return key
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"
    return _read_csi(fd)
