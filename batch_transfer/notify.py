"""Operator notifications for Batch Transfer.

After a run, ``Notifier`` decides from its policy whether to alert
anyone, then reports the run summary through every available channel:

- Windows: accessible_output2 speech (JAWS / NVDA / Narrator) and an
  Application event log entry via pywin32
- macOS: the built-in ``say`` command
- All platforms: the system error sound on failure, where one exists

Channels whose libraries are not installed are skipped.
"""

import logging
import subprocess
import threading

from batch_transfer import __app_name__
from batch_transfer.config import NOTIFY_ALWAYS, NOTIFY_NEVER, NOTIFY_ON_FAILURE
from batch_transfer.platform_utils import IS_MACOS, IS_WINDOWS, play_error_sound
from batch_transfer.report import FailureReport

logger = logging.getLogger(__name__)

# ---- accessible_output2 (Windows screen readers) ----
_HAS_AO2 = False
# ---- pywin32 (Windows event log) ----
_HAS_WIN32 = False
if IS_WINDOWS:
    try:
        from accessible_output2.outputs.auto import (
            Auto as _AO2Auto,  # type: ignore[import-untyped]
        )

        _HAS_AO2 = True
    except ImportError:
        logger.debug("accessible_output2 not installed — speech disabled.")
    try:
        import win32evtlog  # type: ignore[import-untyped]
        import win32evtlogutil  # type: ignore[import-untyped]

        _HAS_WIN32 = True
    except ImportError:
        logger.debug("pywin32 not installed — event log disabled.")

_EVENT_ID_SUCCESS = 1000
_EVENT_ID_FAILURE = 1001
_SPEECH_TIMEOUT = 15.0


class Speaker:
    """
    Reads the run summary aloud before the process exits.

    The announcement runs on a worker thread so a hung screen reader
    cannot stall the batch, and ``say`` waits for it up to *timeout*
    seconds.

    Parameters
    ----------
    output : object, optional
        Anything with ``speak(text, interrupt=...)``; defaults to the
        active accessible_output2 screen reader when installed.
    timeout : float
        Longest wait for one announcement, in seconds.
    """

    def __init__(self, output=None, timeout: float = _SPEECH_TIMEOUT):
        if output is None and _HAS_AO2:
            output = _AO2Auto()  # type: ignore[name-defined]
        self._output = output
        self._timeout = timeout

    @property
    def available(self) -> bool:
        """True if there is a screen reader or the macOS ``say`` command."""
        return self._output is not None or IS_MACOS

    def say(self, text: str) -> bool:
        """Speak *text*, blocking until done; False if skipped or timed out."""
        if not self.available:
            logger.debug("No speech output for: %s", text)
            return False

        worker = threading.Thread(
            target=self._announce, args=(text,), daemon=True, name="Speech"
        )
        worker.start()
        worker.join(self._timeout)
        if worker.is_alive():
            logger.debug("Speech still running after %.0fs; giving up.", self._timeout)
            return False
        return True

    def _announce(self, text: str) -> None:
        try:
            if self._output is not None:
                self._output.speak(text, interrupt=True)
            else:
                subprocess.run(
                    ["say", text],
                    timeout=self._timeout,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            logger.debug("Spoke: %s", text)
        except Exception:
            logger.debug("Speech notification failed.", exc_info=True)


def write_event_log(message: str, is_error: bool) -> bool:
    """Add an Application event log entry.  Returns True if written."""
    if not _HAS_WIN32:
        return False
    try:
        win32evtlogutil.ReportEvent(
            __app_name__,
            _EVENT_ID_FAILURE if is_error else _EVENT_ID_SUCCESS,
            eventType=(
                win32evtlog.EVENTLOG_ERROR_TYPE
                if is_error
                else win32evtlog.EVENTLOG_INFORMATION_TYPE
            ),
            strings=[message],
        )
        return True
    except Exception:
        logger.debug("Event log write failed.", exc_info=True)
        return False


class Notifier:
    """
    Applies the notification policy to a finished run.

    Parameters
    ----------
    mode : str
        One of 'always', 'on_failure', 'never'.
    play_sound_on_error : bool
        Play the system alert sound when the run had failures.
    speech : Speaker, optional
        Reads the summary aloud; a default one is created if omitted.
    """

    def __init__(
        self,
        mode: str = NOTIFY_ON_FAILURE,
        play_sound_on_error: bool = True,
        speech: Speaker | None = None,
    ):
        if mode not in (NOTIFY_ALWAYS, NOTIFY_ON_FAILURE, NOTIFY_NEVER):
            raise ValueError(f"Unknown notification mode: {mode!r}")
        self._mode = mode
        self._play_sound = play_sound_on_error
        self._speech = speech or Speaker()

    def should_notify(self, report: FailureReport) -> bool:
        if self._mode == NOTIFY_NEVER:
            return False
        if self._mode == NOTIFY_ON_FAILURE:
            return report.has_failures
        return True

    def notify(self, report: FailureReport) -> bool:
        """Alert the operator about *report* if the policy says so."""
        if not self.should_notify(report):
            return False

        failed = report.has_failures
        status = "completed with failures" if failed else "completed"
        message = f"{__app_name__} {status}: {report.summary()}"
        logger.info("Notifying: %s", message)

        self._speech.say(message)
        write_event_log(_event_text(report, message), failed)
        if failed and self._play_sound:
            play_error_sound()
        return True


def _event_text(report: FailureReport, headline: str) -> str:
    lines = [headline]
    for result in report.failed_results:
        lines.append(result.summary())
    return "\n".join(lines)
