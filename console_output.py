from __future__ import annotations

import sys

from colorama import Fore, Style, just_fix_windows_console

TOTAL_STEPS = 5
RULE = "━" * 80


def enable_colors() -> None:
    just_fix_windows_console()


def banner(message: str) -> None:
    print(f"{Style.BRIGHT}{Fore.BLUE}{message}{Style.RESET_ALL}\n")


def step(index: int, message: str) -> None:
    print(f"{Fore.CYAN}[{index}/{TOTAL_STEPS}]{Style.RESET_ALL} {message}")


def ok(message: str) -> None:
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} {message}")


def info(message: str) -> None:
    print(f"{Fore.YELLOW}ℹ{Style.RESET_ALL} {message}")


def warn(message: str) -> None:
    print(f"{Fore.YELLOW}⚠{Style.RESET_ALL} {message}")


def dim(message: str) -> None:
    print(f"{Style.DIM}  {message}{Style.RESET_ALL}")


def fail(message: str) -> None:
    print(f"{Fore.RED}✗{Style.RESET_ALL} {message}", file=sys.stderr)


def bold(text: str) -> str:
    return f"{Style.BRIGHT}{text}{Style.RESET_ALL}"
