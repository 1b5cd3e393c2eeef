from flask import Blueprint, request
from flask_login import login_required

from billing.errors import ConflictError, NotFoundError, api_response
from billing.extensions import db
from billing.models.product import Product
from billing.validation import is_blank, json_body, parse_bool, parse_decimal, parse_str, require_fields

bp = Blueprint('products', __name__)


def _get_product(id):
    product = db.session.get(Product, id)
    if product is None:
        raise NotFoundError('Produit non trouvé')
    return product


def _check_name_free(name, exclude_id=None):
    query = Product.query.filter(Product.name == name)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError('Un produit avec ce nom existe déjà')


def _apply(product, data):
    if 'nom' in data:
        product.name = parse_str(data['nom'], 'nom')
    if 'description' in data:
        product.description = parse_str(data['description'], 'description') or ''
    if 'prix' in data:
        product.price = parse_decimal(data['prix'], 'prix', minimum=0)
    if 'categorie' in data:
        product.category = parse_str(data['categorie'], 'categorie')
    if 'actif' in data:
        product.active = parse_bool(data['actif'])


@bp.route('/', methods=['GET'])
@login_required
def index():
    query = Product.query
    if request.args.get('actif') is not None:
        query = query.filter(Product.active == parse_bool(request.args['actif']))
    products = query.order_by(Product.name).all()
    return api_response([product.to_dict() for product in products])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(_get_product(id).to_dict())


@bp.route('/', methods=['POST'])
@login_required
def create():
    data = json_body()
    require_fields(data, ['nom', 'prix', 'categorie'])
    _check_name_free(parse_str(data['nom'], 'nom'))

    product = Product(active=True)
    _apply(product, data)
    db.session.add(product)
    db.session.commit()
    return api_response(product.to_dict(), 'Produit créé avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    product = _get_product(id)
    data = json_body()

    blank = [key for key in ('nom', 'prix', 'categorie') if key in data and is_blank(data[key])]
    if blank:
        require_fields(data, blank)
    if 'nom' in data:
        _check_name_free(parse_str(data['nom'], 'nom'), exclude_id=product.id)

    # Document lines keep the name/description they were created with
    _apply(product, data)
    db.session.commit()
    return api_response(product.to_dict(), 'Produit mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    product = _get_product(id)
    db.session.delete(product)
    db.session.commit()
    return api_response(message='Produit supprimé avec succès')
