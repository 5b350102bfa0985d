#!/usr/bin/env python3
"""
Genera una sequenza di interi in [MIN..MAX] con quote per valore
e senza ripetizioni adiacenti, poi la accoda al file di output
(un numero per riga) stampando su console ogni occorrenza del valore
"highlight".

Default (dataset storico):
  - 997940 numeri tra 1 e 20
  - 1..12 -> 83000 ciascuno, 13..20 -> 1000, 500, 250, 100, 50, 25, 10, 5
  - output in test.output (create-or-append, mai troncato)
  - highlight = 20

Esempi:
  python3 -m src.generative.gen_quota_sequence
  python3 -m src.generative.gen_quota_sequence --seed 42 --out datasets/quota.txt
  python3 -m src.generative.gen_quota_sequence --quota-file quota.json --n 5000 --max 8
  python3 -m src.generative.gen_quota_sequence --reference-probe --on-exhausted abort
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, TextIO

from .quota_tracker import QuotaTracker
from .sequence_builder import Exhausted, SequenceBuilder, is_feasible
from .xorshift_rng import XorShift64

MIN_VALUE = 1
MAX_VALUE = 20
TARGET_N = 997_940
OUT = Path("test.output")
HIGHLIGHT = 20

CARDINALITY_1_TO_12 = 83_000
TAIL_QUOTAS = [1000, 500, 250, 100, 50, 25, 10, 5]  # valori 13..20

DEFAULT_QUOTAS: Dict[int, int] = {
    **{v: CARDINALITY_1_TO_12 for v in range(1, 13)},
    **{13 + i: c for i, c in enumerate(TAIL_QUOTAS)},
}


class QuotaExhaustedError(RuntimeError):
    """Quote esaurite prima di raggiungere la lunghezza richiesta."""

    def __init__(self, index: int, filled: int, reason: str = "exhausted") -> None:
        super().__init__(
            f"distribuzione esaurita ({reason}) allo slot {index}: riempiti {filled} slot"
        )
        self.index = index
        self.filled = filled
        self.reason = reason


class PersistenceError(RuntimeError):
    """Scrittura del file di output fallita."""


def load_quota_file(path: Path) -> Dict[int, int]:
    """Legge una tabella quote JSON: {"1": 83000, "2": 83000, ...}."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: atteso un oggetto JSON valore -> conteggio")
    return {int(k): int(v) for k, v in data.items()}


def generate(
    size: int,
    quotas: Dict[int, int],
    lo: int = MIN_VALUE,
    hi: int = MAX_VALUE,
    seed: int = 0,
    on_exhausted: str = "skip",
    strict_adjacency: bool = True,
) -> List[int]:
    """
    Compone sorgente, quote e builder per un singolo run e ritorna la sequenza.

    on_exhausted:
      - "skip"  : lo slot resta vuoto e si prosegue (sequenza più corta)
      - "abort" : QuotaExhaustedError al primo slot non riempibile
    """
    if on_exhausted not in ("skip", "abort"):
        raise ValueError(f"policy sconosciuta: {on_exhausted!r}")

    # solo il dominio: chiavi fuori da [lo..hi] falserebbero esaurimento e feasibility
    domain = range(min(lo, hi), max(lo, hi) + 1)
    source = XorShift64(seed)
    quota = QuotaTracker({v: quotas.get(v, 0) for v in domain})
    builder = SequenceBuilder(source, quota, lo, hi, strict_adjacency=strict_adjacency)
    print(f"[info] seed={source.seed} N={size} dominio={lo}..{hi}", file=sys.stderr)

    if strict_adjacency and not is_feasible(quota, size, None):
        print(
            f"[warn] le quote non permettono {size} valori senza ripetizioni adiacenti: "
            "alcuni slot resteranno vuoti",
            file=sys.stderr,
        )

    skipped = 0
    for i, outcome in builder.slots(size):
        if not isinstance(outcome, Exhausted):
            continue
        if on_exhausted == "abort":
            raise QuotaExhaustedError(i, len(builder.sequence), outcome.reason)
        skipped += 1

    if skipped:
        print(
            f"[warn] distribuzione esaurita prima del previsto: {skipped} slot saltati, "
            f"generati {len(builder.sequence)}/{size} numeri",
            file=sys.stderr,
        )
    return builder.sequence


def format_records(
    numbers: Iterable[int],
    highlight: Optional[int] = HIGHLIGHT,
    report: Optional[TextIO] = None,
) -> List[str]:
    """Converte in testo; ogni valore uguale a highlight viene stampato su report."""
    if report is None:
        report = sys.stdout
    lines: List[str] = []
    for n in numbers:
        if n == highlight:
            print(n, file=report)
        lines.append(str(n))
    return lines


def write_sequence(
    path: Path,
    numbers: Iterable[int],
    highlight: Optional[int] = HIGHLIGHT,
    report: Optional[TextIO] = None,
) -> int:
    """Accoda i numeri a path (uno per riga). Ritorna il numero di righe scritte."""
    lines = format_records(numbers, highlight, report)
    text = "".join(f"{s}\n" for s in lines)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise PersistenceError(f"scrittura fallita su {path}: {e}") from e
    return len(lines)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Genera una sequenza di interi con quote per valore e senza ripetizioni adiacenti."
    )
    ap.add_argument("--n", type=int, default=TARGET_N, help=f"Lunghezza (default {TARGET_N}).")
    ap.add_argument("--min", dest="lo", type=int, default=MIN_VALUE, help=f"Valore minimo (default {MIN_VALUE}).")
    ap.add_argument("--max", dest="hi", type=int, default=MAX_VALUE, help=f"Valore massimo (default {MAX_VALUE}).")
    ap.add_argument("--seed", type=int, default=0, help="Seed RNG; 0 = derivato dal clock (default 0).")
    ap.add_argument("--quota-file", type=Path, default=None, help="Tabella quote JSON (default: tabella storica).")
    ap.add_argument("--out", type=Path, default=OUT, help=f"File di output, in append (default {OUT}).")
    ap.add_argument("--highlight", type=int, default=HIGHLIGHT, help=f"Valore da stampare su console (default {HIGHLIGHT}).")
    ap.add_argument(
        "--on-exhausted",
        choices=["skip", "abort"],
        default="skip",
        help="Cosa fare se le quote finiscono prima di --n (default skip).",
    )
    ap.add_argument(
        "--reference-probe",
        action="store_true",
        help="Probe storico: controlla solo la quota, può produrre ripetizioni adiacenti.",
    )
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    a = parse_args(argv)

    if a.n < 0:
        raise SystemExit("[err] --n deve essere >= 0")

    quotas = DEFAULT_QUOTAS
    if a.quota_file is not None:
        if not a.quota_file.exists():
            raise SystemExit(f"[err] File quote non trovato: {a.quota_file}")
        try:
            quotas = load_quota_file(a.quota_file)
        except ValueError as e:
            raise SystemExit(f"[err] {e}")

    try:
        numbers = generate(
            a.n,
            quotas,
            lo=a.lo,
            hi=a.hi,
            seed=a.seed,
            on_exhausted=a.on_exhausted,
            strict_adjacency=not a.reference_probe,
        )
    except (QuotaExhaustedError, ValueError) as e:
        raise SystemExit(f"[err] {e}, niente scritto su {a.out}")

    try:
        written = write_sequence(a.out, numbers, a.highlight)
    except PersistenceError as e:
        raise SystemExit(f"[err] {e}")

    print(f"[ok] accodati {written} numeri in {a.out}", file=sys.stderr)


if __name__ == "__main__":
    main()
