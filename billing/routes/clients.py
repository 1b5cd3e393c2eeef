from flask import Blueprint
from flask_login import login_required
import logging
import re

from billing.errors import ConflictError, NotFoundError, api_response
from billing.extensions import db
from billing.models.client import Client
from billing.validation import is_blank, json_body, parse_str, require_fields, validate_email

bp = Blueprint('clients', __name__)
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['nom', 'email', 'telephone', 'adresse', 'ville', 'codePostal', 'pays']

# request key -> model attribute
FIELDS = {
    'nom': 'name',
    'email': 'email',
    'telephone': 'phone',
    'adresse': 'address',
    'ville': 'city',
    'codePostal': 'postal_code',
    'pays': 'country',
    'mf': 'tax_id',
}

CODE_RE = re.compile(r'^CLT-(\d+)$')


def _next_client_code():
    highest = 0
    for (code,) in db.session.query(Client.code).all():
        match = CODE_RE.match(code or '')
        if match:
            highest = max(highest, int(match.group(1)))
    return f"CLT-{highest + 1:05d}"


def _get_client(id):
    client = db.session.get(Client, id)
    if client is None:
        raise NotFoundError('Client non trouvé')
    return client


def _check_email_free(email, exclude_id=None):
    query = Client.query.filter(Client.email == email)
    if exclude_id is not None:
        query = query.filter(Client.id != exclude_id)
    if query.first():
        raise ConflictError('Un client avec cet email existe déjà')


@bp.route('/', methods=['GET'])
@login_required
def index():
    clients = Client.query.order_by(Client.created_at.desc()).all()
    return api_response([client.to_dict() for client in clients])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(_get_client(id).to_dict())


@bp.route('/', methods=['POST'])
@login_required
def create():
    data = json_body()
    require_fields(data, REQUIRED_FIELDS)
    email = validate_email(data['email'])
    _check_email_free(email)

    client = Client(code=_next_client_code())
    for key, attr in FIELDS.items():
        if key in data:
            setattr(client, attr, parse_str(data[key], key))
    client.email = email

    db.session.add(client)
    db.session.commit()
    logger.info('Created client %s', client.code)
    return api_response(client.to_dict(), 'Client créé avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    client = _get_client(id)
    data = json_body()

    blank = [key for key in REQUIRED_FIELDS if key in data and is_blank(data[key])]
    if blank:
        require_fields(data, blank)

    if 'email' in data:
        email = validate_email(data['email'])
        _check_email_free(email, exclude_id=client.id)
        data['email'] = email

    # The client name on existing documents is a snapshot and stays unchanged
    for key, attr in FIELDS.items():
        if key in data:
            setattr(client, attr, parse_str(data[key], key))

    db.session.commit()
    return api_response(client.to_dict(), 'Client mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    client = _get_client(id)
    # Cascades to invoices (with their lines and payments), quotes and delivery notes
    db.session.delete(client)
    db.session.commit()
    logger.info('Deleted client %s', id)
    return api_response(message='Client supprimé avec succès')
