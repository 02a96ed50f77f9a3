from steamserv.core.time.abc import Time
from steamserv.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
