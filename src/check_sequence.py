#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
check_sequence.py
Verifica un file di interi (uno per riga) prodotto da gen_quota_sequence:
- conteggi per valore vs quota iniziale (nessun valore oltre la sua quota)
- valori fuori dominio
- ripetizioni adiacenti (seq[i] == seq[i-1])
- occorrenze del valore highlight

Output: stampa leggibile + opzionale JSON con --report-json.
Exit status 1 se il file viola almeno un vincolo.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .generative.gen_quota_sequence import (
    DEFAULT_QUOTAS,
    HIGHLIGHT,
    MAX_VALUE,
    MIN_VALUE,
    load_quota_file,
)


def read_integers_file(path: str, n: Optional[int] = None) -> List[int]:
    out = []
    with open(path, "r", encoding="utf8", errors="ignore") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                v = int(line)
            except ValueError:
                continue
            out.append(v)
            if n is not None and len(out) >= n:
                break
    return out


def adjacent_repeats(seq: List[int]) -> List[int]:
    """Indici i (>=1) con seq[i] == seq[i-1]."""
    return [i for i in range(1, len(seq)) if seq[i] == seq[i - 1]]


def quota_overruns(counts: Dict[int, int], quotas: Dict[int, int]) -> Dict[int, int]:
    """Valore -> eccedenza, solo per i valori usati più della loro quota."""
    return {v: c - quotas.get(v, 0) for v, c in counts.items() if c > quotas.get(v, 0)}


def analyze(
    seq: List[int],
    quotas: Dict[int, int],
    lo: int = MIN_VALUE,
    hi: int = MAX_VALUE,
    highlight: Optional[int] = HIGHLIGHT,
) -> dict:
    counts = {v: 0 for v in range(lo, hi + 1)}
    out_of_domain = 0
    for x in seq:
        if lo <= x <= hi:
            counts[x] += 1
        else:
            out_of_domain += 1
    repeats = adjacent_repeats(seq)
    over = quota_overruns(counts, quotas)
    return {
        "N": len(seq),
        "domain": [lo, hi],
        "counts": counts,
        "quotas": {v: quotas.get(v, 0) for v in counts},
        "quota_overruns": over,
        "out_of_domain": out_of_domain,
        "adjacent_repeats": len(repeats),
        "first_repeat_index": repeats[0] if repeats else None,
        "highlight": highlight,
        "highlight_positions": [i for i, x in enumerate(seq) if x == highlight],
        "ok": not repeats and not over and out_of_domain == 0,
    }


def print_report(report: dict) -> None:
    lo, hi = report["domain"]
    print(f"N={report['N']}  dominio={lo}..{hi}\n")
    print("Conteggi (usati / quota):")
    for v, c in report["counts"].items():
        q = report["quotas"][v]
        flag = "  <-- oltre quota" if v in report["quota_overruns"] else ""
        print(f"  {v}: {c} / {q}{flag}")
    print()
    if report["out_of_domain"]:
        print(f"Valori fuori dominio: {report['out_of_domain']}")
    print(f"Ripetizioni adiacenti: {report['adjacent_repeats']}", end="")
    if report["first_repeat_index"] is not None:
        print(f" (prima all'indice {report['first_repeat_index']})")
    else:
        print()
    print(f"Highlight {report['highlight']}: {len(report['highlight_positions'])} occorrenze\n")
    print("[ok] vincoli rispettati" if report["ok"] else "[err] vincoli violati")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="check-sequence: verifica quote e ripetizioni adiacenti")
    ap.add_argument("--file", required=True, help="Input file: integers (uno per riga)")
    ap.add_argument("--n", type=int, default=None, help="Limita la lunghezza analizzata")
    ap.add_argument("--min", dest="lo", type=int, default=MIN_VALUE)
    ap.add_argument("--max", dest="hi", type=int, default=MAX_VALUE)
    ap.add_argument("--highlight", type=int, default=HIGHLIGHT)
    ap.add_argument("--quota-file", type=Path, default=None, help="Tabella quote JSON (default: tabella storica)")
    ap.add_argument("--report-json", type=str, default=None, help="Scrive il report in JSON")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    a = parse_args(argv)

    if not Path(a.file).exists():
        raise SystemExit(f"[err] File non trovato: {a.file}")
    quotas = DEFAULT_QUOTAS
    if a.quota_file is not None:
        if not a.quota_file.exists():
            raise SystemExit(f"[err] File quote non trovato: {a.quota_file}")
        try:
            quotas = load_quota_file(a.quota_file)
        except ValueError as e:
            raise SystemExit(f"[err] {e}")

    seq = read_integers_file(a.file, a.n)
    report = analyze(seq, quotas, a.lo, a.hi, a.highlight)
    print_report(report)

    if a.report_json:
        with open(a.report_json, "w", encoding="utf8") as f:
            json.dump(report, f, ensure_ascii=False, indent=2)
        print(f"[report-json] scritto: {a.report_json}")

    if not report["ok"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
