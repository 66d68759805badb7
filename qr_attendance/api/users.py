"""Operator accounts API."""
from flask import Blueprint, g
from flask_jwt_extended import jwt_required
from qr_attendance.services.auth_service import AuthService
from qr_attendance.utils.decorators import admin_required, login_required
from qr_attendance.utils.helpers import success_response

users_bp = Blueprint('users', __name__)

@users_bp.route('', methods=['GET'])
@jwt_required()
@admin_required
def list_users():
    """All operator accounts, without password hashes."""
    users = [user.to_dict() for user in AuthService.list_users()]
    return success_response(data=users)

@users_bp.route('/profile', methods=['GET'])
@jwt_required()
@login_required
def get_profile():
    return success_response(data=g.current_user.to_dict())
