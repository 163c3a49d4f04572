"""Storage-encryption probe."""

from __future__ import annotations

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal
from device_trust.probes.registry import register_probe

CRYPTO_STATE_PROP = "ro.crypto.state"
ENCRYPTED_VALUE = "encrypted"

# Android 6.0; older releases do not report the crypto state reliably.
MIN_API_LEVEL = 23


@register_probe("isEncrypted")
def probe_encrypted(ctx: ProbeContext) -> ProbeResult:
    controller = ctx.controller
    api_level = controller.android_api_level()
    if api_level is None or api_level < MIN_API_LEVEL:
        return None
    state = controller.read_platform_property(CRYPTO_STATE_PROP)
    if state is None:
        return None
    return boolean_signal("isEncrypted", state == ENCRYPTED_VALUE)
