from flask import Blueprint
from flask_login import login_user, logout_user, login_required, current_user
import logging

from billing.errors import AuthenticationError, ConflictError, ValidationError, api_response
from billing.extensions import db
from billing.models.user import User
from billing.validation import json_body, parse_bool, parse_str, require_fields, validate_email

bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    require_fields(data, ['email', 'password', 'nom'])
    email = validate_email(data['email'])
    password = parse_str(data['password'], 'password', strip=False)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f'Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères', field='password')

    if User.query.filter_by(email=email).first():
        raise ConflictError('Un utilisateur avec cet email existe déjà')

    # Self-registered accounts are always plain users
    user = User(email=email, name=parse_str(data['nom'], 'nom'),
                phone=parse_str(data.get('telephone'), 'telephone'), role='user')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    logger.info('Registered user %s', user.email)
    return api_response({'user': user.to_dict()}, 'Utilisateur créé avec succès', 201)


@bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    require_fields(data, ['email', 'password'])

    email = parse_str(data['email'], 'email')
    password = parse_str(data['password'], 'password', strip=False)

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not user.check_password(password):
        raise AuthenticationError('Email ou mot de passe incorrect')

    login_user(user, remember=parse_bool(data.get('remember'), default=False))
    return api_response({'user': user.to_dict()}, 'Connexion réussie')


@bp.route('/profile', methods=['GET'])
@login_required
def profile():
    return api_response({'user': current_user.to_dict()})


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return api_response(message='Déconnexion réussie')
