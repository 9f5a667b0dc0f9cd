#!/usr/bin/env python3
"""
Manage the JSON stores (bookmarks and analytic tasks) in STORAGE_DIR.

Usage:
  python -m solwatch.tools.manage_store bookmarks list
  python -m solwatch.tools.manage_store bookmarks add MINT [--label LABEL]
  python -m solwatch.tools.manage_store bookmarks remove MINT
  python -m solwatch.tools.manage_store tasks list
  python -m solwatch.tools.manage_store tasks add NAME [--params '{"mint": "..."}']
  python -m solwatch.tools.manage_store tasks remove TASK_ID
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from solwatch.config.env import get_storage_dir, load_solwatch_env
from solwatch.stores import AnalyticTaskService, TokMarkService


def _print_rows(rows: list[dict]) -> None:
    for row in rows:
        print(json.dumps(row))


def run(args: argparse.Namespace, storage_dir: Path) -> int:
    if args.store == "bookmarks":
        bookmarks = TokMarkService(storage_dir)
        if args.action == "list":
            _print_rows([asdict(b) for b in bookmarks.list()])
        elif args.action == "add":
            _print_rows([asdict(bookmarks.add(args.target, args.label))])
        elif args.action == "remove":
            if not bookmarks.remove(args.target):
                print(f"No bookmark for {args.target}", file=sys.stderr)
                return 1
        return 0

    tasks = AnalyticTaskService(storage_dir)
    if args.action == "list":
        _print_rows([asdict(t) for t in tasks.list()])
    elif args.action == "add":
        params = json.loads(args.params) if args.params else {}
        if not isinstance(params, dict):
            raise ValueError("--params must be a JSON object")
        _print_rows([asdict(tasks.create(args.target, params))])
    elif args.action == "remove":
        if not tasks.remove(args.target):
            print(f"No task {args.target}", file=sys.stderr)
            return 1
    return 0


def main() -> int:
    load_solwatch_env()
    parser = argparse.ArgumentParser(description="Manage bookmark and task stores.")
    parser.add_argument("store", choices=("bookmarks", "tasks"))
    parser.add_argument("action", choices=("list", "add", "remove"))
    parser.add_argument("target", nargs="?", default=None, help="Mint (bookmarks), name or id (tasks).")
    parser.add_argument("--label", default="", help="Bookmark label.")
    parser.add_argument("--params", default=None, help="Task params as a JSON object.")
    parser.add_argument("--storage-dir", type=Path, default=None, help="Default: STORAGE_DIR or cwd.")
    args = parser.parse_args()

    if args.action != "list" and not args.target:
        parser.error(f"{args.action} requires a target")
    try:
        return run(args, args.storage_dir or get_storage_dir())
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
