#!/usr/bin/env python3
"""
Tail the network trace file.

Usage:
    ./network_tail.py              # Show last 10 requests, then follow
    ./network_tail.py -n 20        # Show last 20 requests, then follow
    ./network_tail.py --no-follow  # Show last 10 requests and exit
    ./network_tail.py -f           # Just follow (no history)
    ./network_tail.py -x           # Full blocks instead of one line each
"""

import argparse
import os
import sys
import time
from pathlib import Path

from netlog.config import LOG_FILE
from netlog.recorder import BLOCK_END, parse_blocks

POLL_SECONDS = 0.5

# ANSI colors
CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def summarize(block: list[str]) -> dict:
    """Pull timestamp, method, URL, status/error and time out of one block."""
    info = {"timestamp": "", "method": "?", "url": "", "status": None, "error": None, "time": ""}

    first = block[0]
    if first.startswith("[") and "]" in first:
        info["timestamp"] = first[1:first.index("]")]

    for line in block[1:]:
        if line.startswith("🌐 ") and not info["url"]:
            parts = line[2:].strip().split(" ", 1)
            info["method"] = parts[0]
            info["url"] = parts[1] if len(parts) > 1 else ""
        elif " STATUS: " in line and info["status"] is None:
            try:
                info["status"] = int(line.rsplit(" ", 1)[-1])
            except ValueError:
                pass
        elif " NETWORK ERROR: " in line and info["error"] is None:
            info["error"] = line.split(" NETWORK ERROR: ", 1)[1]
        elif line.startswith("⏱️ TIME: ") and not info["time"]:
            info["time"] = line.split("TIME: ", 1)[1]

    return info


def status_color(info: dict) -> str:
    status = info["status"]
    if info["error"] is not None or status is None:
        return RED
    if status < 300:
        return GREEN
    if status < 400:
        return CYAN
    if status < 500:
        return YELLOW
    return RED


def format_block(block: list[str]) -> str:
    """One colored summary line for a block."""
    info = summarize(block)
    color = status_color(info)
    status = "ERROR" if info["error"] is not None else str(info["status"] or "?")
    line = f"{DIM}{info['timestamp']}{RESET} {color}{status:>5}{RESET} {BOLD}{info['method']:6}{RESET} {info['url']}"
    if info["time"]:
        line += f"  {DIM}{info['time']}{RESET}"
    if info["error"] is not None:
        line += f"\n      {RED}{info['error']}{RESET}"
    return line


def print_block(block: list[str], expand: bool = False):
    if expand:
        print("\n".join(block))
        print()
    else:
        print(format_block(block))


def take_blocks(buffer: str) -> tuple[list[list[str]], str]:
    """Split off every complete block in buffer; return them and the unfinished remainder."""
    idx = buffer.rfind(BLOCK_END + "\n")
    if idx == -1:
        return [], buffer
    cut = idx + len(BLOCK_END) + 1
    return parse_blocks(buffer[:cut]), buffer[cut:]


def tail(path: Path, count: int = 10, follow: bool = True, expand: bool = False):
    """Tail the trace file."""
    with open(path, encoding="utf-8", errors="replace") as f:
        if count > 0:
            blocks = parse_blocks(f.read())
            for block in blocks[-count:]:
                print_block(block, expand)
        else:
            # Start from end
            f.seek(0, os.SEEK_END)

        if not follow:
            return

        print(f"\n{DIM}--- Following {path} (Ctrl+C to stop) ---{RESET}\n")

        buffer = ""
        try:
            while True:
                chunk = f.read()
                if not chunk:
                    time.sleep(POLL_SECONDS)
                    continue
                buffer += chunk
                blocks, buffer = take_blocks(buffer)
                for block in blocks:
                    print_block(block, expand)
        except KeyboardInterrupt:
            print(f"\n{DIM}Stopped.{RESET}")


def main():
    parser = argparse.ArgumentParser(description="Tail the network trace file")
    parser.add_argument("-n", "--count", type=int, default=10, help="Number of requests to show")
    parser.add_argument("--no-follow", action="store_true", help="Don't follow, just show history")
    parser.add_argument("-f", "--follow-only", action="store_true", help="Only follow, no history")
    parser.add_argument("-x", "--expand", action="store_true", help="Show full request blocks")
    parser.add_argument("--path", type=Path, default=LOG_FILE, help="Trace file to read")

    args = parser.parse_args()

    if not args.path.exists():
        print(f"{RED}Error: No trace file at {args.path}{RESET}", file=sys.stderr)
        sys.exit(1)

    count = 0 if args.follow_only else args.count
    follow = not args.no_follow

    tail(args.path, count=count, follow=follow, expand=args.expand)


if __name__ == "__main__":
    main()
