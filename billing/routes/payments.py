from flask import Blueprint
from flask_login import login_required
import logging

from billing.errors import NotFoundError, api_response
from billing.extensions import db
from billing.models.invoice import Invoice
from billing.models.payment import Payment, PaymentMethod, PaymentStatus
from billing.validation import (
    is_blank, json_body, parse_datetime, parse_decimal, parse_enum, parse_int, parse_str, require_fields,
)

bp = Blueprint('payments', __name__)
logger = logging.getLogger(__name__)


def _get_payment(id):
    payment = db.session.get(Payment, id)
    if payment is None:
        raise NotFoundError('Paiement non trouvé')
    return payment


def _get_invoice(invoice_id):
    invoice = db.session.get(Invoice, parse_int(invoice_id, 'factureId'))
    if invoice is None:
        raise NotFoundError('Facture non trouvée')
    return invoice


def _apply(payment, data):
    # Amounts are not checked against the invoice total
    if 'montant' in data:
        payment.amount = parse_decimal(data['montant'], 'montant', minimum=0)
    if not is_blank(data.get('methode')):
        payment.method = parse_enum(PaymentMethod, data['methode'], 'methode')
    if not is_blank(data.get('statut')):
        payment.status = parse_enum(PaymentStatus, data['statut'], 'statut')
    if not is_blank(data.get('datePaiement')):
        payment.payment_date = parse_datetime(data['datePaiement'], 'datePaiement')
    if 'reference' in data:
        payment.reference = parse_str(data['reference'], 'reference')
    if 'notes' in data:
        payment.notes = parse_str(data['notes'], 'notes', strip=False)


@bp.route('/', methods=['GET'])
@login_required
def index():
    payments = Payment.query.order_by(Payment.payment_date.desc()).all()
    return api_response([payment.to_dict() for payment in payments])


@bp.route('/facture/<int:facture_id>', methods=['GET'])
@login_required
def by_invoice(facture_id):
    payments = (Payment.query.filter_by(invoice_id=facture_id)
                .order_by(Payment.payment_date.desc()).all())
    return api_response([payment.to_dict() for payment in payments])


@bp.route('/status/<statut>', methods=['GET'])
@login_required
def by_status(statut):
    status = parse_enum(PaymentStatus, statut, 'statut')
    payments = (Payment.query.filter_by(status=status)
                .order_by(Payment.payment_date.desc()).all())
    return api_response([payment.to_dict() for payment in payments])


@bp.route('/<int:id>', methods=['GET'])
@login_required
def show(id):
    return api_response(_get_payment(id).to_dict())


@bp.route('/', methods=['POST'])
@login_required
def create():
    data = json_body()
    require_fields(data, ['factureId', 'montant'])
    invoice = _get_invoice(data['factureId'])

    payment = Payment(invoice_id=invoice.id)
    _apply(payment, data)
    db.session.add(payment)
    db.session.commit()
    logger.info('Recorded payment %s on invoice %s', payment.id, invoice.number)
    return api_response(payment.to_dict(), 'Paiement créé avec succès', 201)


@bp.route('/<int:id>', methods=['PUT'])
@login_required
def update(id):
    payment = _get_payment(id)
    data = json_body()
    if not is_blank(data.get('factureId')):
        payment.invoice_id = _get_invoice(data['factureId']).id
    _apply(payment, data)
    db.session.commit()
    return api_response(payment.to_dict(), 'Paiement mis à jour avec succès')


@bp.route('/<int:id>', methods=['DELETE'])
@login_required
def delete(id):
    payment = _get_payment(id)
    db.session.delete(payment)
    db.session.commit()
    return api_response(message='Paiement supprimé avec succès')
