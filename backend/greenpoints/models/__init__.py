from .user import User  # noqa: F401
from .points_account import PointsAccount  # noqa: F401
from .recycle_txn import RecycleTxn  # noqa: F401
from .offer import Offer  # noqa: F401
from .redemption import RedemptionRecord  # noqa: F401

from .idempotency_key import IdempotencyKey  # noqa: F401

from .audit_log import AuditLog  # noqa: F401
