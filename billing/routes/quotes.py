from flask import Blueprint, send_file
from flask_login import login_required
import io

from billing.errors import api_response
from billing.services.documents import QuoteService
from billing.validation import json_body

bp = Blueprint('quotes', __name__)


@bp.route('/', methods=['GET'])
@login_required
def index():
    return api_response([quote.to_dict() for quote in QuoteService.list()])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(QuoteService.get(id).to_dict())


@bp.route('/', methods=['POST'])
@login_required
def create():
    quote = QuoteService.create(json_body())
    return api_response(quote.to_dict(), 'Devis créé avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    quote = QuoteService.update(QuoteService.get(id), json_body())
    return api_response(quote.to_dict(), 'Devis mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    QuoteService.delete(QuoteService.get(id))
    return api_response(message='Devis supprimé avec succès')


@bp.route('/<int:id>/pdf', methods=['GET'])
@login_required
def pdf(id):
    rendered = QuoteService.render(QuoteService.get(id))
    return send_file(
        io.BytesIO(rendered.content),
        mimetype=rendered.mimetype,
        as_attachment=True,
        download_name=rendered.filename
    )
