#!/usr/bin/env python3
"""
Test del builder: probe con wraparound, modalità strict vs reference,
esiti Exhausted e proprietà sulle sequenze generate.
"""

from __future__ import annotations

from collections import Counter
from typing import List

import pytest

from src.generative.quota_tracker import QuotaTracker
from src.generative.sequence_builder import (
    Exhausted,
    Filled,
    SequenceBuilder,
    is_feasible,
)
from src.generative.xorshift_rng import XorShift64


class ScriptedSource:
    """Sorgente finta: restituisce i valori nell'ordine dato."""

    def __init__(self, values: List[int]) -> None:
        self.values = list(values)
        self.calls = 0

    def range(self, lo: int, hi: int) -> int:
        self.calls += 1
        return self.values.pop(0)


def no_adjacent_repeats(seq: List[int]) -> bool:
    return all(seq[i] != seq[i - 1] for i in range(1, len(seq)))


def scaled_quotas() -> dict:
    table = {v: 83 for v in range(1, 13)}
    for v, c in zip(range(13, 21), [10, 5, 3, 2, 1, 1, 1, 1]):
        table[v] = c
    return table


def test_probe_wraps_from_min_to_max() -> None:
    b = SequenceBuilder(XorShift64(1), QuotaTracker({}), 1, 20)
    assert b.probe(1) == 20
    assert b.probe(20) == 19
    assert b.probe(11) == 10


@pytest.mark.parametrize("strict", [True, False])
def test_probe_from_unavailable_min_lands_on_max(strict: bool) -> None:
    table = {v: 5 for v in range(1, 21)}
    table[1] = 0
    b = SequenceBuilder(ScriptedSource([1]), QuotaTracker(table), 1, 20, strict_adjacency=strict)
    assert b.fill_slot(previous=5, slots_left=10) == Filled(20)


@pytest.mark.parametrize("strict", [True, False])
def test_probe_keeps_going_past_max(strict: bool) -> None:
    table = {v: 5 for v in range(1, 21)}
    table[1] = 0
    table[20] = 0
    b = SequenceBuilder(ScriptedSource([1]), QuotaTracker(table), 1, 20, strict_adjacency=strict)
    assert b.fill_slot(previous=5, slots_left=10) == Filled(19)
    assert b.quota.remaining(19) == 4
    assert b.sequence == [19]


def test_redraw_while_equal_to_previous() -> None:
    src = ScriptedSource([3, 3, 3, 2])
    b = SequenceBuilder(src, QuotaTracker({1: 2, 2: 2, 3: 2}), 1, 3)
    assert b.fill_slot(previous=3, slots_left=4) == Filled(2)
    assert src.calls == 4


def test_reference_probe_can_repeat_previous() -> None:
    quota = {1: 0, 2: 5, 3: 0}
    ref = SequenceBuilder(ScriptedSource([1]), QuotaTracker(quota), 1, 3, strict_adjacency=False)
    assert ref.fill_slot(previous=2, slots_left=5) == Filled(2)

    strict = SequenceBuilder(ScriptedSource([1]), QuotaTracker(quota), 1, 3)
    assert strict.fill_slot(previous=2, slots_left=5) == Exhausted("blocked")
    assert strict.sequence == []
    assert strict.quota.remaining(2) == 5


def test_strict_probe_skips_values_that_would_dead_end() -> None:
    # 3 slot rimasti, previous=1: scegliere 3 lascerebbe {2:2} su 2 slot
    b = SequenceBuilder(ScriptedSource([3]), QuotaTracker({1: 0, 2: 2, 3: 1}), 1, 3)
    assert b.fill_slot(previous=1, slots_left=3) == Filled(2)


def test_exhausted_outcome() -> None:
    for strict in (True, False):
        b = SequenceBuilder(ScriptedSource([]), QuotaTracker({1: 0, 2: 0}), 1, 2, strict_adjacency=strict)
        assert b.fill_slot(previous=1, slots_left=3) == Exhausted("exhausted")


def test_reference_first_slot_is_unconstrained() -> None:
    b = SequenceBuilder(ScriptedSource([4]), QuotaTracker({4: 0, 5: 1}), 4, 5, strict_adjacency=False)
    assert b.fill_slot(previous=None, slots_left=2) == Filled(4)
    assert b.quota.remaining(4) == 0


def test_single_value_domain_is_rejected() -> None:
    b = SequenceBuilder(XorShift64(1), QuotaTracker({7: 3}), 7, 7)
    with pytest.raises(ValueError):
        list(b.slots(3))
    assert [o for _, o in b.slots(1)] == [Filled(7)]


def test_is_feasible() -> None:
    assert is_feasible(QuotaTracker({1: 2, 2: 2}), 4, None)
    assert not is_feasible(QuotaTracker({1: 3, 2: 1}), 4, None)
    assert is_feasible(QuotaTracker({1: 2, 2: 1}), 3, None)
    assert not is_feasible(QuotaTracker({1: 2, 2: 1}), 3, 1)
    assert is_feasible(QuotaTracker({}), 0, 5)


@pytest.mark.parametrize("seed", [1, 2, 3, 12345, 2**63 + 17])
def test_strict_sequences_respect_quotas_and_adjacency(seed: int) -> None:
    quotas = scaled_quotas()
    b = SequenceBuilder(XorShift64(seed), QuotaTracker(quotas), 1, 20)
    outcomes = [o for _, o in b.slots(1000)]

    assert all(isinstance(o, Filled) for o in outcomes)
    seq = b.sequence
    assert len(seq) == 1000
    assert no_adjacent_repeats(seq)
    counts = Counter(seq)
    assert all(counts[v] <= quotas[v] for v in counts)


@pytest.mark.parametrize("seed", [1, 99])
def test_reference_sequences_respect_quotas(seed: int) -> None:
    quotas = scaled_quotas()
    b = SequenceBuilder(XorShift64(seed), QuotaTracker(quotas), 1, 20, strict_adjacency=False)
    list(b.slots(1000))
    counts = Counter(b.sequence)
    assert len(b.sequence) == 1000
    assert all(counts[v] <= quotas[v] for v in counts)


def test_exact_quota_table_is_used_up_exactly() -> None:
    quotas = {1: 2, 2: 2, 3: 2, 4: 2}
    b = SequenceBuilder(XorShift64(2024), QuotaTracker(quotas), 1, 4)
    list(b.slots(8))
    assert Counter(b.sequence) == Counter({1: 2, 2: 2, 3: 2, 4: 2})
    assert no_adjacent_repeats(b.sequence)
    assert b.quota.is_exhausted()


def test_build_returns_sequence_and_outcomes() -> None:
    b = SequenceBuilder(XorShift64(5), QuotaTracker({1: 1, 2: 1}), 1, 2, strict_adjacency=False)
    seq, outcomes = b.build(4)
    assert sorted(seq) == [1, 2]
    assert seq is b.sequence
    assert [type(o) for o in outcomes] == [Filled, Filled, Exhausted, Exhausted]
    assert outcomes[2] == Exhausted("exhausted")
