"""
Pawn Race engine.

Usage:
    python main.py play w|b [--time-limit S] [--workers N]   - Play a game over stdin/stdout
    python main.py gaptable [--depth D] [--output PATH]      - Precompute the gap table
"""

import sys
import argparse
import logging

from pawnrace.config import Config
from pawnrace.move import Side
from pawnrace.engine.search import Search
from pawnrace.gap_table import build_gap_table, write_gap_table
from pawnrace.play import play_game


def play(colour: str, time_limit: float, workers: int):
    """Play one game, moves on stdin/stdout, boards on stderr."""
    side = Side.WHITE if colour in ("w", "W") else Side.BLACK
    with Search(side, time_limit=time_limit, workers=workers) as search:
        play_game(colour, sys.stdin, sys.stdout, sys.stderr, search=search)


def gaptable(depth: int, output: str):
    """
    Rank all 64 gap pairs for Black and write them to `output`.

    Args:
        depth: Plies searched after White's first move
        output: Destination file, one pair per line
    """
    print(f"Scoring gap pairs at depth {depth}...", file=sys.stderr)
    rows = build_gap_table(depth)
    write_gap_table(output, rows)
    print(f"{output} generated and sorted.", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(description='Pawn Race')
    parser.add_argument('--verbose', action='store_true',
                        help='Log search progress')
    subparsers = parser.add_subparsers(dest='command', required=True)

    play_parser = subparsers.add_parser('play', help='Play a game over stdin/stdout')
    play_parser.add_argument('colour', choices=['w', 'W', 'b', 'B'],
                             help='Side played by the engine')
    play_parser.add_argument('--time-limit', type=float, default=Config.TIME_LIMIT_S,
                             help=f'Seconds per move (default: {Config.TIME_LIMIT_S})')
    play_parser.add_argument('--workers', type=int, default=Config.SEARCH_WORKERS,
                             help=f'Search worker processes (default: {Config.SEARCH_WORKERS})')

    table_parser = subparsers.add_parser('gaptable', help='Precompute the gap table')
    table_parser.add_argument('--depth', type=int, default=Config.GAP_TABLE_DEPTH,
                              help=f'Search depth (default: {Config.GAP_TABLE_DEPTH})')
    table_parser.add_argument('--output', default=Config.GAP_TABLE_PATH,
                              help=f'Output file (default: {Config.GAP_TABLE_PATH})')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.command == 'play':
        play(args.colour, args.time_limit, args.workers)
    elif args.command == 'gaptable':
        gaptable(args.depth, args.output)


if __name__ == "__main__":
    if len(sys.argv) == 1:
        print("Usage: python main.py [play w|b|gaptable] [--time-limit S] [--workers N] [--depth D] [--output PATH]")
    else:
        main()
