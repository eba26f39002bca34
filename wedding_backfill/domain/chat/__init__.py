"""Chat domain - real-time notifications for client/partner conversations"""

from .registry import ConversationEventRegistry, Subscription
from .router import router

__all__ = ["ConversationEventRegistry", "Subscription", "router"]
