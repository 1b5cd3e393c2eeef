from flask import Blueprint
from flask_login import current_user

from billing.errors import ConflictError, NotFoundError, ValidationError, api_response
from billing.extensions import db
from billing.models.user import ROLES, User
from billing.security import role_required
from billing.validation import json_body, parse_bool, parse_str, validate_email

bp = Blueprint('users', __name__)


def _get_user(id):
    user = db.session.get(User, id)
    if user is None:
        raise NotFoundError('Utilisateur non trouvé')
    return user


@bp.route('/', methods=['GET'])
@role_required('admin')
def index():
    users = User.query.order_by(User.created_at.desc()).all()
    return api_response([user.to_dict() for user in users])


@bp.route('/<int:id>', methods=['GET'])
@role_required('admin')
def show(id):
    return api_response(_get_user(id).to_dict())


@bp.route('/<int:id>', methods=['PUT'])
@role_required('admin')
def update(id):
    user = _get_user(id)
    data = json_body()

    if 'email' in data:
        email = validate_email(data['email'])
        if User.query.filter(User.email == email, User.id != user.id).first():
            raise ConflictError('Un utilisateur avec cet email existe déjà')
        user.email = email
    if 'nom' in data:
        user.name = parse_str(data['nom'], 'nom')
    if 'telephone' in data:
        user.phone = parse_str(data['telephone'], 'telephone')
    if 'role' in data:
        if data['role'] not in ROLES:
            raise ValidationError(f"role invalide (valeurs possibles : {', '.join(ROLES)})", field='role')
        user.role = data['role']
    if 'actif' in data:
        user.active = parse_bool(data['actif'])
    if data.get('password'):
        user.set_password(parse_str(data['password'], 'password', strip=False))

    db.session.commit()
    return api_response(user.to_dict(), 'Utilisateur mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@role_required('admin')
def delete(id):
    user = _get_user(id)
    if user.id == current_user.id:
        raise ValidationError('Impossible de supprimer votre propre compte')
    db.session.delete(user)
    db.session.commit()
    return api_response(message='Utilisateur supprimé avec succès')
