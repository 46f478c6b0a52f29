from .analysis import AnalyzeRequest, parse_analysis_result
from .auth import Token, UserCreate, UserLogin, UserResponse
from .billing import CheckoutRequest, CheckoutResponse, PortalResponse, SubscriptionStatus
from .scan import SaveScanRequest, SaveScanResponse, ScanDetail, ScanHistoryItem, ShareResponse

__all__ = [
    "AnalyzeRequest",
    "CheckoutRequest",
    "CheckoutResponse",
    "PortalResponse",
    "SaveScanRequest",
    "SaveScanResponse",
    "ScanDetail",
    "ScanHistoryItem",
    "ShareResponse",
    "SubscriptionStatus",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "parse_analysis_result",
]
