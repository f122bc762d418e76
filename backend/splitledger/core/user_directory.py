"""
User Directory - existence checks and lookups over the users collection.

The split engine assumes participant ids were validated here first.
"""
from typing import Optional, Any, Dict, List, Tuple
from bson import ObjectId
from bson.errors import InvalidId

from splitledger.extensions import db as mongo
from splitledger.utils.enums import ErrorCode
from splitledger.utils.errors import LedgerError


class UserDirectory:
    """Service for looking up users by id."""

    PUBLIC_FIELDS = {"_id": 1, "name": 1, "email": 1}

    @staticmethod
    def parse_ids(user_ids: List[str]) -> Tuple[Optional[List[ObjectId]], Optional[LedgerError]]:
        """Convert ids to ObjectIds, rejecting malformed ones."""
        try:
            return [ObjectId(uid) for uid in user_ids], None
        except (InvalidId, TypeError):
            return None, LedgerError(ErrorCode.INVALID_PARTICIPANT_ID, "Invalid participant IDs")

    @staticmethod
    def canonical_id(user_id: Any) -> Any:
        """Lower-case hex form of a valid ObjectId string; anything else is returned unchanged."""
        if isinstance(user_id, str) and ObjectId.is_valid(user_id):
            return str(ObjectId(user_id))
        return user_id

    @classmethod
    def ensure_exist(cls, user_ids: List[str]) -> Optional[LedgerError]:
        """Check every id is a known user."""
        oids, error = cls.parse_ids(user_ids)
        if error:
            return error

        found = mongo.users.count_documents({"_id": {"$in": oids}})
        if found != len(oids):
            return LedgerError(
                ErrorCode.PARTICIPANT_NOT_FOUND,
                "One or more participants do not exist"
            )
        return None

    @classmethod
    def find_user(cls, user_id: str) -> Optional[Dict]:
        oids, error = cls.parse_ids([user_id])
        if error:
            return None
        user = mongo.users.find_one({"_id": oids[0]}, cls.PUBLIC_FIELDS)
        if user:
            user["_id"] = str(user["_id"])
        return user

    @classmethod
    def list_peers(cls, subject_id: str) -> List[Dict]:
        """All users except ``subject_id``, ordered by name."""
        query = {}
        oids, error = cls.parse_ids([subject_id])
        if not error:
            query["_id"] = {"$ne": oids[0]}

        users = list(mongo.users.find(query, cls.PUBLIC_FIELDS).sort("name", 1))
        for user in users:
            user["_id"] = str(user["_id"])
        return users

    @classmethod
    def display_names(cls, user_ids: List[str]) -> Dict[str, str]:
        """Map ids to a human-readable name; unknown ids map to themselves."""
        names = {uid: uid for uid in user_ids}
        valid = [ObjectId(uid) for uid in user_ids if ObjectId.is_valid(uid)]
        if not valid:
            return names

        for user in mongo.users.find({"_id": {"$in": valid}}, cls.PUBLIC_FIELDS):
            uid = str(user["_id"])
            names[uid] = user.get("name") or user.get("email") or uid
        return names
