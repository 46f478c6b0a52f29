from .error_log import ErrorLog
from .scan import TongueScan
from .scan_usage import ScanUsage
from .subscription import Subscription
from .tokens import ShareToken
from .user import User

__all__ = [
    "ErrorLog",
    "ScanUsage",
    "ShareToken",
    "Subscription",
    "TongueScan",
    "User",
]
