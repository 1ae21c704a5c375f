from .user_service import get_user_by_id, get_users_by_ids, upsert_user_profile

__all__ = ["get_user_by_id", "get_users_by_ids", "upsert_user_profile"]
