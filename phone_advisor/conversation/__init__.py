from phone_advisor.conversation.intent_classifier import IntentClassifier
from phone_advisor.conversation.kv_store import SQLiteKeyValueStore
from phone_advisor.conversation.memory import MemoryStore

__all__ = ["IntentClassifier", "MemoryStore", "SQLiteKeyValueStore"]
