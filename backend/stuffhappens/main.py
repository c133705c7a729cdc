from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from .models import User

main = Blueprint('main', __name__)


@main.route('/sessions', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not username or not password:
        return jsonify({'errors': ['username and password are required']}), 422
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        login_user(user)
        return jsonify(user.to_dict()), 201
    return jsonify({'error': 'Incorrect username or password.'}), 401


@main.route('/sessions/current', methods=['GET'])
@login_required
def current_session():
    return jsonify(current_user.to_dict())


@main.route('/sessions/current', methods=['DELETE'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})
