"""
secret_input.py - Read the secret to hash or compare.

A secret comes from exactly one place:
- a positional argument, only when --insecure is given (it ends up in shell
  history and process listings)
- an interactive prompt without echo when stdin is a terminal
- otherwise all of stdin, minus one trailing line ending
"""

from __future__ import annotations

import getpass
import os
import sys
from typing import BinaryIO, Optional

from .errors import InsecureArgument, KDFError


def _strip_line_ending(data: bytes) -> bytes:
    if data.endswith(b"\r\n"):
        return data[:-2]
    if data.endswith(b"\n"):
        return data[:-1]
    return data


def read_secret(
    prompt: str,
    argument: Optional[str] = None,
    insecure: bool = False,
    argument_name: str = "INPUT",
    stdin: Optional[BinaryIO] = None,
) -> bytes:
    if argument is not None:
        if not insecure:
            raise InsecureArgument(argument_name)
        # argv holds undecodable bytes as surrogates; recover them as-is
        return os.fsencode(argument)

    if stdin is None and sys.stdin is not None and sys.stdin.isatty():
        return getpass.getpass(prompt).encode("utf-8")

    if stdin is None and sys.stdin is None:
        raise KDFError(f"no {argument_name} given and stdin is not available", field=argument_name)

    stream = stdin if stdin is not None else sys.stdin.buffer
    return _strip_line_ending(stream.read())
