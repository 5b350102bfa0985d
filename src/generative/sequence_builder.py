#!/usr/bin/env python3
"""
Costruzione della sequenza vincolata, slot per slot, senza backtracking.

Per ogni slot:
  1. quote tutte a zero -> esito Exhausted (la policy la decide il chiamante)
  2. estrazione casuale in [lo..hi]
  3. ri-estrazione finché il candidato è uguale al valore precedente
  4. probe lineare verso il predecessore (lo -> hi in wraparound)
     finché il candidato non è disponibile
  5. commit + decremento della quota

Due modalità di probe:

- strict (default): il probe salta anche il valore precedente e ogni valore
  che renderebbe impossibile riempire gli slot rimanenti senza ripetizioni
  adiacenti. Se nessun valore del dominio passa -> Exhausted("blocked").
- reference (strict_adjacency=False): il probe controlla solo la quota,
  quindi un valore raggiunto col probe può coincidere col precedente.
  Stessa sequenza, a parità di seed, del generatore storico.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from .quota_tracker import QuotaTracker
from .xorshift_rng import XorShift64


@dataclass(frozen=True)
class Filled:
    value: int


@dataclass(frozen=True)
class Exhausted:
    reason: str = "exhausted"  # "exhausted" | "blocked"


SlotOutcome = Union[Filled, Exhausted]


def is_feasible(quota: QuotaTracker, slots_left: int, previous: Optional[int]) -> bool:
    """
    Esiste un riempimento di slots_left posizioni, senza ripetizioni adiacenti,
    che non inizi con previous?

    Vale sse sum_v min(c_v, cap_v) >= L, con cap = L // 2 per previous
    e (L + 1) // 2 per gli altri valori.
    """
    if slots_left <= 0:
        return True
    total = quota.capped_total((slots_left + 1) // 2)
    if previous is not None:
        c = quota.remaining(previous)
        total += min(c, slots_left // 2) - min(c, (slots_left + 1) // 2)
    return total >= slots_left


class SequenceBuilder:
    def __init__(
        self,
        source: XorShift64,
        quota: QuotaTracker,
        lo: int,
        hi: int,
        strict_adjacency: bool = True,
    ) -> None:
        if lo > hi:
            lo, hi = hi, lo
        self.source = source
        self.quota = quota
        self.lo = lo
        self.hi = hi
        self.strict_adjacency = strict_adjacency
        self.sequence: list[int] = []

    @property
    def span(self) -> int:
        return self.hi - self.lo + 1

    def probe(self, candidate: int) -> int:
        """Predecessore nel dominio, con wraparound lo -> hi."""
        return self.hi if candidate == self.lo else candidate - 1

    def _draw(self, previous: Optional[int]) -> int:
        candidate = self.source.range(self.lo, self.hi)
        while candidate == previous:
            candidate = self.source.range(self.lo, self.hi)
        return candidate

    def _commit(self, value: int) -> Filled:
        self.sequence.append(value)
        self.quota.decrement(value)
        return Filled(value)

    def _acceptable(self, candidate: int, previous: Optional[int], after: int, capped: int) -> bool:
        if candidate == previous or not self.quota.available(candidate):
            return False
        # feasibility dopo il commit: candidate diventa il "previous" con c - 1
        c = self.quota.remaining(candidate)
        total = capped - min(c, (after + 1) // 2) + min(c - 1, after // 2)
        return total >= after

    def fill_slot(self, previous: Optional[int], slots_left: int) -> SlotOutcome:
        """Riempie uno slot; slots_left conta anche lo slot corrente."""
        if previous is None and not self.strict_adjacency:
            # primo slot storico: estrazione libera + commit
            return self._commit(self.source.range(self.lo, self.hi))

        if self.quota.is_exhausted():
            return Exhausted("exhausted")

        candidate = self._draw(previous)

        if not self.strict_adjacency:
            for _ in range(self.span):
                if self.quota.available(candidate):
                    return self._commit(candidate)
                candidate = self.probe(candidate)
            return Exhausted("blocked")

        after = slots_left - 1
        capped = self.quota.capped_total((after + 1) // 2)
        for _ in range(self.span):
            if self._acceptable(candidate, previous, after, capped):
                return self._commit(candidate)
            candidate = self.probe(candidate)
        return Exhausted("blocked")

    def slots(self, size: int) -> Iterator[Tuple[int, SlotOutcome]]:
        """Genera (indice, esito) per gli slot 0..size-1, in ordine."""
        if size > 1 and self.lo == self.hi:
            raise ValueError(
                f"dominio di un solo valore ({self.lo}): impossibile evitare ripetizioni su {size} slot"
            )
        previous: Optional[int] = None
        for i in range(size):
            outcome = self.fill_slot(previous, size - i)
            if isinstance(outcome, Filled):
                previous = outcome.value
            yield i, outcome

    def build(self, size: int) -> Tuple[List[int], List[SlotOutcome]]:
        """Tutti gli slot in un colpo: (sequenza, esiti). Gli Exhausted restano negli esiti."""
        outcomes = [outcome for _, outcome in self.slots(size)]
        return self.sequence, outcomes
