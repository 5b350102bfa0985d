#!/usr/bin/env python3
"""
Quote residue per valore del dominio.

La tabella iniziale (valore -> conteggio) arriva da fuori: qui si tiene solo
lo stato in memoria, decrementato di 1 a ogni commit e mai sotto lo zero.
"""

from __future__ import annotations

from typing import Dict, Mapping


class QuotaTracker:
    def __init__(self, table: Mapping[int, int]) -> None:
        self._remaining: Dict[int, int] = {int(v): max(0, int(c)) for v, c in table.items()}

    @property
    def values(self) -> list[int]:
        return sorted(self._remaining)

    def remaining(self, value: int) -> int:
        """Conteggio residuo; valori fuori tabella valgono 0."""
        return self._remaining.get(value, 0)

    def decrement(self, value: int) -> None:
        """Decremento saturante: a 0 resta 0, nessun errore."""
        left = self._remaining.get(value, 0)
        if left > 0:
            self._remaining[value] = left - 1

    def available(self, value: int) -> bool:
        return self.remaining(value) > 0

    def is_exhausted(self) -> bool:
        """True solo se TUTTI i valori sono a 0."""
        return all(c == 0 for c in self._remaining.values())

    def total(self) -> int:
        return sum(self._remaining.values())

    def capped_total(self, cap: int) -> int:
        """Somma di min(conteggio, cap) su tutto il dominio."""
        return sum(min(c, cap) for c in self._remaining.values())
