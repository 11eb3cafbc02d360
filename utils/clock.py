"""Wall-clock helpers (epoch milliseconds, the unit used for expiry bookkeeping)"""
import time


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)
