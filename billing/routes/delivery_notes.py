from flask import Blueprint, send_file
from flask_login import login_required
import io

from billing.errors import api_response
from billing.services.documents import DeliveryNoteService
from billing.validation import json_body

bp = Blueprint('delivery_notes', __name__)


@bp.route('/', methods=['GET'])
@login_required
def index():
    return api_response([note.to_dict() for note in DeliveryNoteService.list()])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(DeliveryNoteService.get(id).to_dict())


@bp.route('/', methods=['POST'])
@login_required
def create():
    note = DeliveryNoteService.create(json_body())
    return api_response(note.to_dict(), 'Bon de livraison créé avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    note = DeliveryNoteService.update(DeliveryNoteService.get(id), json_body())
    return api_response(note.to_dict(), 'Bon de livraison mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    DeliveryNoteService.delete(DeliveryNoteService.get(id))
    return api_response(message='Bon de livraison supprimé avec succès')


@bp.route('/<int:id>/pdf', methods=['GET'])
@login_required
def pdf(id):
    rendered = DeliveryNoteService.render(DeliveryNoteService.get(id))
    return send_file(
        io.BytesIO(rendered.content),
        mimetype=rendered.mimetype,
        as_attachment=True,
        download_name=rendered.filename
    )
