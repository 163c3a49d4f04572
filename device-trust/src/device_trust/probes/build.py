"""Build-provenance probes."""

from __future__ import annotations

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal, text_signal
from device_trust.probes.registry import register_probe

BUILD_TAGS_PROP = "ro.build.tags"
SECURITY_PATCH_PROP = "ro.build.version.security_patch"

# Builds signed with the public AOSP test key are not vendor-official.
TEST_KEYS_MARKER = "test-keys"


def is_test_build(build_tags: str) -> bool:
    return TEST_KEYS_MARKER in build_tags


@register_probe("buildTags")
def probe_build_tags(ctx: ProbeContext) -> ProbeResult:
    tags = ctx.controller.read_platform_property(BUILD_TAGS_PROP)
    if tags is None:
        return None
    return text_signal("buildTags", tags)


@register_probe("isTestBuild")
def probe_test_build(ctx: ProbeContext) -> ProbeResult:
    tags = ctx.controller.read_platform_property(BUILD_TAGS_PROP)
    if tags is None:
        return None
    return boolean_signal("isTestBuild", is_test_build(tags))


@register_probe("officialBuild")
def probe_official_build(ctx: ProbeContext) -> ProbeResult:
    tags = ctx.controller.read_platform_property(BUILD_TAGS_PROP)
    if tags is None:
        return None
    return boolean_signal("officialBuild", not is_test_build(tags))


@register_probe("securityPatchLevel")
def probe_security_patch_level(ctx: ProbeContext) -> ProbeResult:
    level = ctx.controller.read_platform_property(SECURITY_PATCH_PROP)
    if level is None:
        return None
    return text_signal("securityPatchLevel", level)
