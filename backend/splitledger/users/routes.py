from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from splitledger.core import UserDirectory

users_bp = Blueprint("users", __name__)

@users_bp.route("/profile", methods=["GET"])
@jwt_required()
def profile():
    uid = get_jwt_identity()
    user = UserDirectory.find_user(uid)

    if not user:
        return jsonify({"error": "User not found"}), 404

    return jsonify(user)


@users_bp.route("/peers", methods=["GET"])
@jwt_required()
def list_peers():
    """Everyone the current user can add to an expense (excludes themself)."""
    uid = get_jwt_identity()
    users = UserDirectory.list_peers(uid)
    return jsonify({"users": users, "count": len(users)})
