"""Runtime adapters (adb-backed platform access)."""
