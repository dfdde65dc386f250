"""
Client-side generation of chronologically ordered record keys.

Keys follow the realtime database "push id" scheme: 8 characters encoding
the millisecond timestamp followed by 12 random characters, all drawn from
an alphabet whose ASCII order matches its value order. Keys generated later
sort after keys generated earlier, including several within the same
millisecond (the random part is incremented instead of re-drawn).

Generating the key locally is what lets ``add`` hand the key back before
the write is confirmed, or even before the connection exists.
"""

import secrets
import time

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class PushIdGenerator:
    """
    Stateful key generator.

    Example:
        >>> gen = PushIdGenerator()
        >>> a, b = gen.next_id(), gen.next_id()
        >>> len(a), a < b
        (20, True)
    """

    def __init__(self) -> None:
        self._last_ms = -1
        self._last_rand = [0] * 12

    def next_id(self, now_ms: int | None = None) -> str:
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        duplicate = now_ms <= self._last_ms
        if duplicate:
            # keep ordering even if the clock stalls or steps back
            now_ms = self._last_ms
            self._increment_random()
        else:
            self._last_rand = [secrets.randbelow(64) for _ in range(12)]
        self._last_ms = now_ms

        ts_chars = []
        value = now_ms
        for _ in range(8):
            ts_chars.append(PUSH_CHARS[value % 64])
            value //= 64
        if value:
            raise ValueError("Timestamp out of range for push id")

        return "".join(reversed(ts_chars)) + "".join(PUSH_CHARS[i] for i in self._last_rand)

    def _increment_random(self) -> None:
        i = 11
        while i >= 0 and self._last_rand[i] == 63:
            self._last_rand[i] = 0
            i -= 1
        if i < 0:
            raise RuntimeError("Push id random space exhausted within one millisecond")
        self._last_rand[i] += 1
