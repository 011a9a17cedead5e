"""Non-blocking single-key input for the live session display."""

from __future__ import annotations

import select
import sys


class KeyReader:
    """Reads single keypresses from a POSIX terminal without blocking."""

    def __init__(self):
        self.fd = sys.stdin.fileno()
        self.old_settings = None
        self._setup()

    def _setup(self) -> None:
        import termios
        import tty

        try:
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error:
            # Not a terminal (piped input)
            self.old_settings = None

    def get_key(self) -> str | None:
        """Return the pressed key in lower case, or None if nothing is waiting."""
        if select.select([sys.stdin], [], [], 0)[0]:
            key = sys.stdin.read(1)
            return key.lower() if key else None
        return None

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is None:
            return
        import termios

        termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
        self.old_settings = None

    def __enter__(self) -> KeyReader:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


class WindowsKeyReader:
    """Key reader for Windows consoles using msvcrt."""

    def __init__(self):
        import msvcrt

        self.msvcrt = msvcrt

    def get_key(self) -> str | None:
        if not self.msvcrt.kbhit():
            return None
        key = self.msvcrt.getch()
        if isinstance(key, bytes):
            key = key.decode("utf-8", errors="ignore")
        return key.lower() or None

    def stop(self) -> None:
        pass

    def __enter__(self) -> WindowsKeyReader:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


def open_key_reader() -> KeyReader | WindowsKeyReader:
    """Pick the key reader for the current platform."""
    if sys.platform == "win32":
        return WindowsKeyReader()
    return KeyReader()
