"""Bootloader-lock probes (verified boot state + flash lock flag)."""

from __future__ import annotations

from typing import Optional

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal, text_signal
from device_trust.probes.registry import register_probe

VERIFIED_BOOT_STATE_PROP = "ro.boot.verifiedbootstate"
FLASH_LOCKED_PROP = "ro.boot.flash.locked"

UNVERIFIED_BOOT_STATE = "orange"
FLASH_LOCKED_VALUE = "1"


def bootloader_unlocked(boot_state: Optional[str], flash_locked: Optional[str]) -> Optional[bool]:
    """Unlocked iff boot state is "orange" OR the flash-lock flag is not "1".

    Both properties absent means the state cannot be evaluated (None). A
    missing flag next to a present boot state counts as "not locked".
    """

    if boot_state is None and flash_locked is None:
        return None
    if boot_state == UNVERIFIED_BOOT_STATE:
        return True
    return flash_locked != FLASH_LOCKED_VALUE


@register_probe("isBootloaderUnlocked")
def probe_bootloader_unlocked(ctx: ProbeContext) -> ProbeResult:
    controller = ctx.controller
    unlocked = bootloader_unlocked(
        controller.read_platform_property(VERIFIED_BOOT_STATE_PROP),
        controller.read_platform_property(FLASH_LOCKED_PROP),
    )
    if unlocked is None:
        return None
    return boolean_signal("isBootloaderUnlocked", unlocked)


@register_probe("verifiedBootState")
def probe_verified_boot_state(ctx: ProbeContext) -> ProbeResult:
    state = ctx.controller.read_platform_property(VERIFIED_BOOT_STATE_PROP)
    if state is None:
        return None
    return text_signal("verifiedBootState", state)
