from __future__ import annotations

from colorama import Fore, Style

from console_output import RULE

CONTEXT_CHARS = 80


def render_diff(
    title: str,
    content: str,
    start: int,
    end: int,
    new_text: str,
    context: int = CONTEXT_CHARS,
) -> list[str]:
    """Before/after lines for replacing content[start:end] with new_text."""
    before = content[max(0, start - context):start]
    old_text = content[start:end]
    after = content[end:min(len(content), end + context)]

    return [
        f"\n{Style.DIM}━━━ {title} ━━━{Style.RESET_ALL}",
        f"{Fore.RED}[-] OLD:{Style.RESET_ALL} {before}{Fore.RED}{old_text}{Style.RESET_ALL}{after}",
        f"{Fore.GREEN}[+] NEW:{Style.RESET_ALL} {before}{Fore.GREEN}{new_text}{Style.RESET_ALL}{after}",
        f"{Style.DIM}{RULE}{Style.RESET_ALL}\n",
    ]


def show_diff(
    title: str,
    content: str,
    start: int,
    end: int,
    new_text: str,
    context: int = CONTEXT_CHARS,
) -> None:
    for line in render_diff(title, content, start, end, new_text, context):
        print(line)
