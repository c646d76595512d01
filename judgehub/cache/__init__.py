from judgehub.cache.adapter import EntityAdapter, NormalizedState, create_selector, normalize_record
from judgehub.cache.endpoints import MUTATIONS, QUERIES, Tag, list_tag
from judgehub.cache.store import ApiCache, MutationResult, QueryResult, Subscription, TagRegistry
from judgehub.cache.transport import ApiResponse, ContestApiClient, TransportError

__all__ = [
    "ApiCache",
    "ApiResponse",
    "ContestApiClient",
    "EntityAdapter",
    "MUTATIONS",
    "MutationResult",
    "NormalizedState",
    "QUERIES",
    "QueryResult",
    "Subscription",
    "Tag",
    "TagRegistry",
    "TransportError",
    "create_selector",
    "list_tag",
    "normalize_record",
]
