#!/usr/bin/env python3
"""
RNG xorshift a 64 bit, veloce e deterministico.

- stato: un unico intero a 64 bit (unsigned), che è anche il "seed" corrente
- seed = 0 -> seed derivato dal clock (time.time_ns), mai 0 come stato
- next() restituisce un intero non negativo a 63 bit
- range(lo, hi) restituisce un intero in [lo..hi] con riduzione modulo
  (il bias del modulo su range non potenza di 2 è accettato)

Niente random globale: ogni run si crea la sua istanza.
"""

from __future__ import annotations

import time

MASK64 = (1 << 64) - 1
MASK63 = (1 << 63) - 1
SIGN64 = 1 << 63


def time_seed() -> int:
    """Seed "non specificato": dal clock in ns, ridotto a 64 bit e mai 0."""
    return (time.time_ns() & MASK64) or 1


def xorshift64(state: int) -> int:
    """Un passo della ricorrenza (<<21, >>>35, <<4). Funzione pura."""
    s = state & MASK64
    s ^= (s << 21) & MASK64
    s ^= s >> 35  # shift logico: s è già unsigned
    s ^= (s << 4) & MASK64
    return s


def to_raw63(state: int) -> int:
    """|stato - 1| letto come signed 64 bit, ridotto a 63 bit."""
    d = (state - 1) & MASK64
    if d & SIGN64:
        d -= 1 << 64
    return abs(d) & MASK63


class XorShift64:
    """Sorgente pseudo-random con stato esplicito (leggibile e impostabile)."""

    def __init__(self, seed: int = 0) -> None:
        if seed == 0:
            seed = time_seed()
        self._state = seed & MASK64

    @property
    def seed(self) -> int:
        return self._state

    @seed.setter
    def seed(self, value: int) -> None:
        self._state = value & MASK64

    def next(self) -> int:
        self._state = xorshift64(self._state)
        return to_raw63(self._state)

    def range(self, lo: int, hi: int) -> int:
        """
        Intero in [lo..hi] inclusivo.

        Se lo > hi i limiti vengono scambiati. Se lo == hi ritorna lo
        SENZA consumare un'estrazione: una chiamata non avanza sempre lo stato.
        """
        if lo > hi:
            return self.range(hi, lo)
        if lo == hi:
            return lo
        return lo + self.next() % (hi - lo + 1)
