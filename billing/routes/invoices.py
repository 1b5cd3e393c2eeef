from flask import Blueprint, send_file
from flask_login import login_required
import io

from billing.errors import api_response
from billing.services.documents import InvoiceService
from billing.validation import json_body

bp = Blueprint('invoices', __name__)


@bp.route('/', methods=['GET'])
@login_required
def index():
    invoices = InvoiceService.list()
    return api_response([inv.to_dict() for inv in invoices])


@bp.route('/status/<statut>', methods=['GET'])
@login_required
def by_status(statut):
    invoices = InvoiceService.list(status=statut)
    return api_response([inv.to_dict() for inv in invoices])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(InvoiceService.get(id).to_dict())


@bp.route('/<int:id>/details', methods=['GET'])
@login_required
def details(id):
    return api_response(InvoiceService.details(InvoiceService.get(id)))


@bp.route('/', methods=['POST'])
@login_required
def create():
    invoice = InvoiceService.create(json_body())
    return api_response(invoice.to_dict(), 'Facture créée avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    invoice = InvoiceService.update(InvoiceService.get(id), json_body())
    return api_response(invoice.to_dict(), 'Facture mise à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    InvoiceService.delete(InvoiceService.get(id))
    return api_response(message='Facture supprimée avec succès')


@bp.route('/<int:id>/pdf', methods=['GET'])
@login_required
def pdf(id):
    rendered = InvoiceService.render(InvoiceService.get(id))
    return send_file(
        io.BytesIO(rendered.content),
        mimetype=rendered.mimetype,
        as_attachment=True,
        download_name=rendered.filename
    )
