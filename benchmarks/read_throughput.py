from __future__ import annotations

import argparse
from datetime import datetime
import json
import os
from pathlib import Path
import statistics
import tempfile
import time
import tracemalloc
from dataclasses import dataclass
from typing import Callable

from enctextfile import Encoding, TextFile

# Codec name used by builtin open() for each buffered encoding
_CODECS = {
    Encoding.IDENTITY_8BIT: "latin-1",
    Encoding.UTF8: "utf-8-sig",
    Encoding.UTF16LE: "utf-16",
    Encoding.UTF16BE: "utf-16",
}

_SAMPLE_LINE = "00:01:02,500 --> 00:01:04,000 Très bien, merci. Ça va ?"


@dataclass
class CaseResult:
    backend: str
    case: str
    seconds_mean: float
    seconds_min: float
    seconds_max: float
    peak_kib_mean: float


def _run_with_memory(fn: Callable[[], None]) -> tuple[float, float]:
    tracemalloc.start()
    start = time.perf_counter()
    fn()
    elapsed = time.perf_counter() - start
    _, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    return elapsed, peak / 1024.0


def write_sample(directory: str, encoding: Encoding, line_count: int) -> str:
    path = os.path.join(directory, f"sample_{encoding.name.lower()}.txt")
    tf = TextFile()
    if not tf.save(path, encoding):
        raise RuntimeError(f"Cannot create sample file {path}")
    with tf:
        for i in range(line_count):
            tf.write_line(f"{i} {_SAMPLE_LINE}")
    return path


def bench_textfile_lines(path: str, encoding: Encoding, line_count: int, buffer_size: int) -> None:
    with TextFile(encoding, buffer_size=buffer_size) as tf:
        if not tf.open(path):
            raise RuntimeError(f"TextFile cannot open {path}")
        count = sum(1 for _ in tf)
    if count != line_count:
        raise RuntimeError("TextFile line benchmark validation failed")


def bench_builtin_lines(path: str, encoding: Encoding, line_count: int) -> None:
    with open(path, encoding=_CODECS[encoding], newline=None) as f:
        count = sum(1 for _ in f)
    if count != line_count:
        raise RuntimeError("builtin open() line benchmark validation failed")


def bench_textfile_reread(path: str, encoding: Encoding, rounds: int, buffer_size: int) -> None:
    with TextFile(encoding, buffer_size=buffer_size) as tf:
        if not tf.open(path):
            raise RuntimeError(f"TextFile cannot open {path}")
        for _ in range(rounds):
            pos = tf.tell()
            first, ok = tf.read_line()
            tf.seek(pos)
            again, ok_again = tf.read_line()
            if not (ok and ok_again) or first != again:
                raise RuntimeError("TextFile reread benchmark validation failed")


def bench_builtin_reread(path: str, encoding: Encoding, rounds: int) -> None:
    with open(path, encoding=_CODECS[encoding], newline=None) as f:
        for _ in range(rounds):
            pos = f.tell()
            first = f.readline()
            f.seek(pos)
            again = f.readline()
            if not first or first != again:
                raise RuntimeError("builtin open() reread benchmark validation failed")


def _fmt_ms(seconds: float) -> str:
    return f"{seconds * 1000.0:.2f}"


def _fmt_kib(peak_kib: float) -> str:
    return f"{peak_kib:.1f}"


def run_case(
    backend: str,
    case: str,
    fn: Callable[[], None],
    repeat: int,
    warmup: int,
) -> CaseResult:
    for _ in range(warmup):
        fn()

    elapsed_list: list[float] = []
    peak_list: list[float] = []
    for _ in range(repeat):
        elapsed, peak_kib = _run_with_memory(fn)
        elapsed_list.append(elapsed)
        peak_list.append(peak_kib)

    return CaseResult(
        backend=backend,
        case=case,
        seconds_mean=statistics.mean(elapsed_list),
        seconds_min=min(elapsed_list),
        seconds_max=max(elapsed_list),
        peak_kib_mean=statistics.mean(peak_list),
    )


def print_table(results: list[CaseResult]) -> None:
    print("| Case | Backend | mean(ms) | min(ms) | max(ms) | peak KiB (mean) |")
    print("|---|---:|---:|---:|---:|---:|")
    for r in results:
        print(
            f"| {r.case} | {r.backend} | {_fmt_ms(r.seconds_mean)} |"
            f" {_fmt_ms(r.seconds_min)} | {_fmt_ms(r.seconds_max)} | {_fmt_kib(r.peak_kib_mean)} |"
        )


def _results_to_dict(results: list[CaseResult]) -> list[dict[str, float | str]]:
    return [
        {
            "backend": r.backend,
            "case": r.case,
            "seconds_mean": r.seconds_mean,
            "seconds_min": r.seconds_min,
            "seconds_max": r.seconds_max,
            "peak_kib_mean": r.peak_kib_mean,
        }
        for r in results
    ]


def _results_markdown(results: list[CaseResult], args: argparse.Namespace) -> str:
    lines = [
        "# Read Throughput Results",
        "",
        f"- generated_at: `{datetime.now().isoformat(timespec='seconds')}`",
        f"- repeat: `{args.repeat}`",
        f"- warmup: `{args.warmup}`",
        f"- lines: `{args.lines}`",
        f"- rereads: `{args.rereads}`",
        f"- buffer_kb: `{args.buffer_kb}`",
        "",
        "| Case | Backend | mean(ms) | min(ms) | max(ms) | peak KiB (mean) |",
        "|---|---:|---:|---:|---:|---:|",
    ]
    for r in results:
        lines.append(
            f"| {r.case} | {r.backend} | {_fmt_ms(r.seconds_mean)} | {_fmt_ms(r.seconds_min)}"
            f" | {_fmt_ms(r.seconds_max)} | {_fmt_kib(r.peak_kib_mean)} |"
        )
    lines.append("")
    return "\n".join(lines)


def _resolve_output_path(raw: str) -> Path:
    if raw != "auto":
        return Path(raw)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = Path("benchmarks") / "results"
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir / f"read_throughput_{ts}.md"


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Benchmark TextFile line reading vs builtin open()"
    )
    parser.add_argument("--repeat", type=int, default=5)
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument("--lines", type=int, default=50000)
    parser.add_argument("--rereads", type=int, default=2000)
    parser.add_argument("--buffer-kb", type=int, default=64)
    parser.add_argument(
        "--encodings",
        nargs="+",
        default=[e.name for e in _CODECS],
        choices=[e.name for e in _CODECS],
    )
    parser.add_argument("--json", action="store_true")
    parser.add_argument(
        "--save-md", default="", help="Save markdown report path (or 'auto')"
    )
    args = parser.parse_args()

    buffer_size = args.buffer_kb * 1024
    results: list[CaseResult] = []

    with tempfile.TemporaryDirectory() as td:
        for name in args.encodings:
            encoding = Encoding[name]
            path = write_sample(td, encoding, args.lines)
            case = f"lines_{name.lower()}"
            results.append(
                run_case(
                    "TextFile",
                    case,
                    lambda: bench_textfile_lines(path, encoding, args.lines, buffer_size),
                    args.repeat,
                    args.warmup,
                )
            )
            results.append(
                run_case(
                    "open()",
                    case,
                    lambda: bench_builtin_lines(path, encoding, args.lines),
                    args.repeat,
                    args.warmup,
                )
            )

            case = f"reread_{name.lower()}"
            results.append(
                run_case(
                    "TextFile",
                    case,
                    lambda: bench_textfile_reread(path, encoding, args.rereads, buffer_size),
                    args.repeat,
                    args.warmup,
                )
            )
            results.append(
                run_case(
                    "open()",
                    case,
                    lambda: bench_builtin_reread(path, encoding, args.rereads),
                    args.repeat,
                    args.warmup,
                )
            )

    if args.json:
        print(json.dumps(_results_to_dict(results), indent=2))
        return

    print_table(results)

    if args.save_md:
        md_path = _resolve_output_path(args.save_md)
        md_path.parent.mkdir(parents=True, exist_ok=True)
        md_path.write_text(_results_markdown(results, args), encoding="utf-8")
        print(f"\nSaved markdown report: {md_path}")


if __name__ == "__main__":
    main()
