"""콘솔 출력용 ANSI 컬러 헬퍼.

``NO_COLOR`` 환경변수가 설정되어 있으면 색상 없이 텍스트만 출력합니다.
"""
import os

from colorama import Fore, Style, just_fix_windows_console

just_fix_windows_console()

COLOR_ENABLED = "NO_COLOR" not in os.environ


def _paint(text, *codes: str) -> str:
    if not COLOR_ENABLED:
        return f"{text}"
    return "".join(codes) + f"{text}{Style.RESET_ALL}"


def fg(text, color=Fore.WHITE) -> str:
    """`text` 에 글자색을 입힙니다."""
    return _paint(text, color)


def bold(text, color=Fore.WHITE) -> str:
    return _paint(text, Style.BRIGHT, color)
