"""Android controller utilities.

Thin adb wrapper used by every probe and by the inventory scanner. All device
reads go through here so that:
  * each adb invocation carries a bounded timeout
  * probes can use the fail-soft helpers (`read_platform_property`,
    `path_exists`, ...) which return `None` instead of raising

Notes
-----
* Every operation is read-only; nothing here mutates device state.
* The controller keeps no state besides its immutable configuration, so one
  instance can be shared by concurrent diagnostic requests.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

from device_trust.errors import DeviceTrustError

logger = logging.getLogger(__name__)


class AndroidControllerError(DeviceTrustError):
    """Raised when an adb operation fails."""


@dataclass(frozen=True)
class AdbResult:
    args: list[str]
    stdout: str
    stderr: str
    returncode: int

    def ok(self) -> bool:
        return self.returncode == 0


_MISSING_PROPERTY_VALUES = {"", "null"}
_UNREADABLE_MARKER = "__device_trust_unreadable__"


class AndroidController:
    """Thin wrapper around adb for read-only device queries."""

    def __init__(
        self,
        *,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._adb_path = adb_path
        self._serial = serial
        self._timeout_s = timeout_s

    @property
    def serial(self) -> Optional[str]:
        return self._serial

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def _base_cmd(self) -> list[str]:
        cmd = [self._adb_path]
        if self._serial:
            cmd += ["-s", self._serial]
        return cmd

    def adb(self, *args: str, timeout_s: float | None = None, check: bool = True) -> AdbResult:
        """Run an adb command and return stdout/stderr/returncode."""

        cmd = self._base_cmd() + list(args)
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=self._timeout_s if timeout_s is None else float(timeout_s),
        )
        result = AdbResult(
            args=cmd,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )
        if check and not result.ok():
            raise AndroidControllerError(
                f"adb command failed (rc={result.returncode}): {' '.join(cmd)}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        return result

    def adb_shell(
        self,
        command: str,
        *,
        timeout_s: float | None = None,
        timeout_ms: int | None = None,
        check: bool = True,
    ) -> AdbResult:
        if timeout_ms is not None:
            timeout_s = float(timeout_ms) / 1000.0
        return self.adb("shell", command, timeout_s=timeout_s, check=check)

    def getprop(self, name: str, *, timeout_s: float | None = None) -> AdbResult:
        return self.adb_shell(
            f"getprop {shlex.quote(name)}", timeout_s=timeout_s, check=False
        )

    def settings_get(
        self,
        *,
        namespace: str,
        key: str,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        cmd = " ".join(shlex.quote(p) for p in ("settings", "get", namespace, key))
        return self.adb_shell(cmd, timeout_s=timeout_s, check=check)

    def dumpsys(
        self,
        service: str,
        *args: str,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        parts = ["dumpsys", service, *args]
        cmd = " ".join(shlex.quote(p) for p in parts)
        return self.adb_shell(cmd, timeout_s=timeout_s, check=check)

    def list_packages(self, *flags: str, timeout_s: float | None = None) -> AdbResult:
        """`pm list packages` with optional flags (e.g. `-f`, `-s`).

        Raises AndroidControllerError on a non-zero exit code.
        """

        parts = ["pm", "list", "packages", *flags]
        cmd = " ".join(shlex.quote(p) for p in parts)
        return self.adb_shell(cmd, timeout_s=timeout_s, check=True)

    # ------------------------------ Fail-soft reads ------------------------------

    def read_platform_property(self, name: str) -> Optional[str]:
        """Return a system property value, or None when unset/unreadable."""

        try:
            res = self.getprop(name)
        except Exception as e:
            logger.debug("getprop %s failed: %s", name, e)
            return None
        if not res.ok():
            return None
        value = (res.stdout or "").strip()
        if value.lower() in _MISSING_PROPERTY_VALUES:
            return None
        return value

    def read_setting(self, namespace: str, key: str) -> Optional[str]:
        """Return a `settings get` value, or None when unset/unreadable."""

        try:
            res = self.settings_get(namespace=namespace, key=key, check=False)
        except Exception as e:
            logger.debug("settings get %s %s failed: %s", namespace, key, e)
            return None
        if not res.ok():
            return None
        value = (res.stdout or "").strip()
        if value.lower() in _MISSING_PROPERTY_VALUES:
            return None
        return value

    # Older adb shells exit 0 regardless of the remote status, so path checks
    # and reads decide from what the device prints rather than the exit code.
    def _test_path(self, flag: str, path: str) -> bool:
        res = self.adb_shell(
            f"test {flag} {shlex.quote(path)} && echo 1 || echo 0", check=False
        )
        return res.ok() and (res.stdout or "").strip() == "1"

    def path_exists(self, path: str) -> bool:
        """True iff `path` exists on the device.

        Transport failures propagate; callers decide how to degrade.
        """

        return self._test_path("-e", path)

    def path_readable(self, path: str) -> bool:
        return self._test_path("-r", path)

    def read_text(self, path: str, *, timeout_s: float | None = None) -> Optional[str]:
        """`cat` a readable device file; None when it is missing or the read fails."""

        quoted = shlex.quote(path)
        cmd = f"test -r {quoted} && cat {quoted} || echo {_UNREADABLE_MARKER}"
        try:
            res = self.adb_shell(cmd, timeout_s=timeout_s, check=False)
        except Exception as e:
            logger.debug("cat %s failed: %s", path, e)
            return None
        if not res.ok():
            return None
        if (res.stdout or "").strip() == _UNREADABLE_MARKER:
            return None
        return res.stdout

    def file_size(self, path: str) -> Optional[int]:
        """Size in bytes of a device file (`stat -c %s`), None on failure."""

        try:
            res = self.adb_shell(f"stat -c %s {shlex.quote(path)}", check=False)
        except Exception as e:
            logger.debug("stat %s failed: %s", path, e)
            return None
        raw = (res.stdout or "").strip()
        if not res.ok() or not raw.isdigit():
            return None
        return int(raw)

    def android_api_level(self) -> Optional[int]:
        raw = self.read_platform_property("ro.build.version.sdk")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            logger.debug("android_api_level parse failed: %r", raw[:30])
            return None

    def is_responsive(self, *, timeout_s: float = 5.0) -> bool:
        """Best-effort check that adb shell answers."""

        try:
            res = self.adb_shell("echo __device_trust_ok__", timeout_s=timeout_s, check=False)
        except Exception as e:
            logger.debug("adb shell unresponsive: %s", e)
            return False
        return res.ok() and "__device_trust_ok__" in (res.stdout or "")
