from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy import or_

from worldstage import db
from worldstage.models import User, utcnow
from worldstage.services.errors import NotFound, ValidationError
from worldstage.services.tokens import create_access_token

auth = Blueprint('auth', __name__)

MIN_PASSWORD_LENGTH = 6


@auth.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not all([username, email, password]):
        raise ValidationError('Username, email, and password are required')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')
    if User.query.filter(or_(User.username == username, User.email == email)).first():
        raise ValidationError('Username or email already exists')

    user = User(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[register] user={user.id} username={user.username}")

    return jsonify({
        'success': True,
        'message': 'User registered successfully',
        'user': user.to_dict(),
        'token': create_access_token(user),
    }), 201


@auth.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not username or not password:
        raise ValidationError('Username and password are required')

    user = User.query.filter_by(username=username, is_active=True).first()
    if not user or not user.check_password(password):
        return jsonify({'success': False, 'message': 'Invalid username or password'}), 401

    # Response reports the previous login, the row records this one
    previous_login = user.last_login
    token = create_access_token(user)
    user.last_login = utcnow()
    db.session.commit()

    payload = user.to_dict()
    payload['lastLogin'] = previous_login.isoformat() if previous_login else None
    return jsonify({
        'success': True,
        'message': 'Login successful',
        'user': payload,
        'token': token,
    })


@auth.route('/profile', methods=['GET'])
@login_required
def profile():
    user = db.session.get(User, current_user.id)
    if not user or not user.is_active:
        raise NotFound('User not found')
    return jsonify({'success': True, 'user': user.to_dict()})
