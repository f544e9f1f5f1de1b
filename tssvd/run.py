"""
TSSVD Command Line
==================

Loads a sparse matrix from a row,col,value text file, computes its tall
and skinny SVD and writes U, S and V back in the same format.

Usage:
    python -m tssvd <master> <matrix_file> <m> <n> <min_svalue> <output_U> <output_S> <output_V>

    python -m tssvd local data/A.txt 100000 20 1e-4 out/U.txt out/S.txt out/V.txt
    python -m tssvd 'local[4]' data/A.txt 100000 20 1e-4 out/U.txt out/S.txt out/V.txt --check

<master> is the execution target: local (n_jobs from the config, default one
worker), local[N] (N workers) or local[*] (all cores).

Exit status: 0 on success, 1 on usage or computation errors.
"""

import argparse
import logging
import re
import sys
import time
from typing import List, Optional

from tssvd.config import load_config
from tssvd.core.diagnostics import check_decomposition
from tssvd.core.eigen import EIGENSOLVERS
from tssvd.errors import TSSVDError
from tssvd.io.reader import load_entries
from tssvd.io.writer import write_entries
from tssvd.svd import sparse_svd

logger = logging.getLogger(__name__)

_MASTER_PATTERN = re.compile(r'^local(?:\[(\*|\d+)\])?$')


class UsageError(Exception):
    """Bad command-line arguments."""


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(1)


def parse_master(master: str) -> Optional[int]:
    """Worker count for an execution target: local, local[N], local[*].

    Plain local returns None so the configured n_jobs applies.
    """
    match = _MASTER_PATTERN.match(master)
    if not match:
        raise UsageError(f"Unsupported master {master!r} (expected local, local[N] or local[*])")

    workers = match.group(1)
    if workers is None:
        return None
    if workers == '*':
        return -1
    if int(workers) < 1:
        raise UsageError(f"Worker count must be >= 1 in {master!r}")
    return int(workers)


def build_parser() -> argparse.ArgumentParser:
    """Construct the command-line parser."""
    parser = _Parser(
        prog='tssvd',
        description="Tall and skinny sparse SVD",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Input/output format: one row,col,value record per line, 1-indexed.

Usage:
  tssvd local A.txt 1000 10 1e-6 U.txt S.txt V.txt
  tssvd 'local[*]' A.txt 1000 10 1e-6 U.txt S.txt V.txt --method scipy
""",
    )
    parser.add_argument('master', help='execution target: local, local[N] or local[*]')
    parser.add_argument('matrix_file', help='input matrix (row,col,value per line)')
    parser.add_argument('m', type=int, help='number of rows')
    parser.add_argument('n', type=int, help='number of columns')
    parser.add_argument('min_svalue', type=float, help='recover singular values >= this')
    parser.add_argument('output_u', help='output file for U')
    parser.add_argument('output_s', help='output file for S')
    parser.add_argument('output_v', help='output file for V')
    parser.add_argument('--config', default=None, help='YAML config file (default: ./tssvd.yaml if present)')
    parser.add_argument('--method', default=None, choices=EIGENSOLVERS, help='dense eigensolver')
    parser.add_argument('--partitions', type=int, default=None, help='row partitions for aggregation')
    parser.add_argument('--sum-duplicates', action='store_true', default=None,
                        help='sum repeated (row, col) entries on load')
    parser.add_argument('--check', action='store_true',
                        help='print orthonormality and reconstruction errors (dense, small inputs only)')
    parser.add_argument('-q', '--quiet', action='store_true', help='suppress progress output')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    verbose = not args.quiet

    try:
        master_jobs = parse_master(args.master)
        config = load_config(
            args.config,
            overrides={
                'eigensolver': args.method,
                'n_partitions': args.partitions,
                'sum_duplicates': args.sum_duplicates,
            },
        )
    except (UsageError, TSSVDError, FileNotFoundError) as e:
        parser.print_usage(sys.stderr)
        print(f"tssvd: error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, config['log_level'].upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        if verbose:
            print(f"[tssvd] Loading {args.matrix_file} ...")
        data = load_entries(args.matrix_file, sum_duplicates=config['sum_duplicates'])
        if verbose:
            print(f"[tssvd]   {data.height:,} entries, {args.m} x {args.n}")

        t0 = time.time()
        result = sparse_svd(
            data,
            args.m,
            args.n,
            args.min_svalue,
            method=config['eigensolver'],
            n_partitions=config['n_partitions'],
            n_jobs=master_jobs if master_jobs is not None else config['n_jobs'],
        )
        if verbose:
            print(f"[tssvd]   done in {time.time() - t0:.1f}s")
    except (TSSVDError, FileNotFoundError) as e:
        print(f"tssvd: error: {e}", file=sys.stderr)
        return 1

    print(f"Computed {result.rank} singular values and vectors")

    if args.check:
        report = check_decomposition(data, result, args.m, args.n)
        print(f"  max |U'U - I|:   {report['u_orthonormality']:.3e}")
        print(f"  max |V'V - I|:   {report['v_orthonormality']:.3e}")
        print(f"  max |A - USV'|:  {report['reconstruction']:.3e}")

    write_entries(result.U, args.output_u, verbose=verbose)
    write_entries(result.S, args.output_s, verbose=verbose)
    write_entries(result.V, args.output_v, verbose=verbose)
    return 0


if __name__ == '__main__':
    sys.exit(main())
