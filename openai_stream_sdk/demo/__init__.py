"""Demo chat application: in-memory conversation store and FastAPI relay.

The FastAPI app lives in ``openai_stream_sdk.demo.app`` and is not imported
here so that using the store does not construct the default app.
"""

from .conversations import Conversation, ConversationStore, DemoMessage, UnknownConversationError

__all__ = ["Conversation", "ConversationStore", "DemoMessage", "UnknownConversationError"]
