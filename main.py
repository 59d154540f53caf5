"""Sadhana v1.0 — CLI entry point."""

import argparse
import logging
from datetime import date

from sadhana import analyze, generate_report


def create_parser():
    today = date.today()
    parser = argparse.ArgumentParser(
        prog="sadhana",
        description="Score a month of sadhana logs and print the monthly report.",
        epilog="Example: python main.py --data test_data.json --year 2025 --month 1 --target 16",
    )
    parser.add_argument("--data", default="test_data.json",
                        help="Path to a JSON list of activity logs (default: test_data.json)")
    parser.add_argument("--year", type=int, default=today.year, help="Year to analyze")
    parser.add_argument("--month", type=int, default=today.month, help="Month to analyze (1-12)")
    parser.add_argument("--target", type=int, default=None,
                        help="Daily chanting target in rounds (default: 16)")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline stages")
    return parser


def main(argv=None):
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    result = analyze(args.data, args.year, args.month, target_rounds=args.target)
    print(generate_report(result))


if __name__ == "__main__":
    main()
