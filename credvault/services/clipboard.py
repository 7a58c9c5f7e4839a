"""Best-effort "copy this text" with ordered fallbacks.

Stages, tried in order until one succeeds:

  1. clipboard-api  native clipboard write (secure context only)
  2. execCommand    copy command against an off-screen multi-line buffer
  3. manual-select  copy command against an off-screen single-line buffer
  4. fallback       show the text for manual copying (selectable field,
                    then a blocking prompt)

A stage that raises counts as a failed stage.  copy_to_clipboard never
raises; the only real failure is stage 4 finding no way to show the text,
and even then the text is alerted to the user.  There is no timeout: stage
4 may wait on the user indefinitely.

The host UI supplies a CopyEnvironment.  TerminalCopyEnvironment is the
one used from the command line and in server logs.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass
from typing import Literal, Protocol, TextIO

from credvault.core.errors import TransportExhaustedError

logger = logging.getLogger(__name__)

ClipboardMethod = Literal["clipboard-api", "execCommand", "manual-select", "fallback"]

MANUAL_COPY_INSTRUCTION = (
    "The text has been selected. Press Ctrl+C (or Cmd+C on Mac) to copy, "
    "then click OK."
)
PROMPT_MESSAGE = "Copy this text (Ctrl+C / Cmd+C):"
EXHAUSTED_MESSAGE = "All clipboard methods failed"


@dataclass(frozen=True, slots=True)
class ClipboardResult:
    success: bool
    method: ClipboardMethod | None = None
    error: str | None = None

    def raise_for_failure(self) -> None:
        if not self.success:
            raise TransportExhaustedError(self.error)


class CopyEnvironment(Protocol):
    def has_native_clipboard(self) -> bool:
        """Native clipboard API present and usable (secure context)."""
        ...

    async def write_native(self, text: str) -> None: ...

    def has_copy_command(self) -> bool: ...

    def copy_command_supported(self) -> bool: ...

    def copy_via_buffer(self, text: str, *, multiline: bool) -> bool:
        """Select *text* in an off-screen buffer and run the copy command.

        Returns False when the command reports failure or is unavailable.
        """
        ...

    def show_selectable(self, text: str, instruction: str) -> None:
        """Put *text* somewhere visible and selectable; raise if impossible."""
        ...

    def prompt(self, message: str, text: str) -> bool:
        """Blocking prompt pre-filled with *text*.  False if unavailable."""
        ...

    def alert(self, message: str) -> None: ...


# ---- the chain ----


async def copy_to_clipboard(text: str, env: CopyEnvironment) -> ClipboardResult:
    """Try each copy method in turn.  Never raises; failure is in the result."""
    try:
        if env.has_native_clipboard():
            await env.write_native(text)
            return _copied("clipboard-api")
    except Exception as e:
        logger.warning("Clipboard API failed: %s", e)

    for method, multiline in (("execCommand", True), ("manual-select", False)):
        try:
            if env.copy_via_buffer(text, multiline=multiline):
                return _copied(method)  # type: ignore[arg-type]
            logger.info("Clipboard stage %s reported failure", method)
        except Exception as e:
            logger.warning("Clipboard stage %s failed: %s", method, e)

    return _manual_fallback(text, env)


def _copied(method: ClipboardMethod) -> ClipboardResult:
    logger.debug("Copied via %s", method, extra={"clipboard_method": method})
    return ClipboardResult(success=True, method=method)


def _manual_fallback(text: str, env: CopyEnvironment) -> ClipboardResult:
    try:
        env.show_selectable(text, MANUAL_COPY_INSTRUCTION)
        return ClipboardResult(success=True, method="fallback")
    except Exception as e:
        logger.warning("Selectable copy field unavailable: %s", e)

    try:
        if env.prompt(PROMPT_MESSAGE, text):
            return ClipboardResult(success=True, method="fallback")
    except Exception as e:
        logger.warning("Copy prompt failed: %s", e)

    try:
        env.alert(f"Unable to copy automatically. Please copy this text manually:\n\n{text}")
    except Exception as e:
        logger.warning("Copy alert failed: %s", e)
    logger.error(EXHAUSTED_MESSAGE)
    return ClipboardResult(success=False, method="fallback", error=EXHAUSTED_MESSAGE)


def is_clipboard_supported(env: CopyEnvironment) -> bool:
    """Pick "automatic" vs "manual" wording; never a reason to skip copying."""
    return bool(
        env.has_native_clipboard()
        or env.has_copy_command()
        or env.copy_command_supported()
    )


def get_clipboard_message(result: ClipboardResult) -> str:
    if not result.success:
        return "Unable to copy automatically. Please copy manually."
    if result.method in ("clipboard-api", "execCommand", "manual-select"):
        return "Copied to clipboard!"
    if result.method == "fallback":
        return "Please copy the text from the dialog"
    return "Copied successfully!"


# ---- terminal host ----

# First entry found on PATH is the multi-line stage, second the single-line one.
_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


class TerminalCopyEnvironment:
    """CopyEnvironment for a terminal session.

    There is no browser clipboard API here, so stage 1 is always skipped.
    Stages 2 and 3 pipe into OS clipboard tools found on PATH.  Stage 4
    prints the framed text to *stream*.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        commands: tuple[tuple[str, ...], ...] | None = None,
        command_timeout: float = 5.0,
    ) -> None:
        self._stream = stream if stream is not None else sys.stderr
        candidates = _CLIPBOARD_COMMANDS if commands is None else commands
        self._commands = [c for c in candidates if shutil.which(c[0])]
        self._timeout = command_timeout

    def has_native_clipboard(self) -> bool:
        return False

    async def write_native(self, text: str) -> None:
        raise RuntimeError("no native clipboard in a terminal")

    def has_copy_command(self) -> bool:
        return bool(self._commands)

    def copy_command_supported(self) -> bool:
        return bool(self._commands)

    def copy_via_buffer(self, text: str, *, multiline: bool) -> bool:
        if not self._commands:
            return False
        if multiline:
            command = self._commands[0]
        else:
            command = self._commands[1] if len(self._commands) > 1 else self._commands[0]
            # single-line fields drop line breaks
            text = text.replace("\r", "").replace("\n", "")
        completed = subprocess.run(
            command,
            input=text,
            text=True,
            capture_output=True,
            timeout=self._timeout,
            check=False,
        )
        return completed.returncode == 0

    def show_selectable(self, text: str, instruction: str) -> None:
        if self._stream is None or self._stream.closed:
            raise RuntimeError("no output stream")
        rule = "-" * min(max(len(text), 20), 80)
        self._stream.write(f"{instruction}\n{rule}\n{text}\n{rule}\n")
        self._stream.flush()

    def prompt(self, message: str, text: str) -> bool:
        if not sys.stdin or not sys.stdin.isatty():
            return False
        input(f"{message}\n{text}\n[Enter] ")
        return True

    def alert(self, message: str) -> None:
        print(message, file=sys.stderr)
