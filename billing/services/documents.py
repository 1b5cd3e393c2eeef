import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from billing.errors import ConflictError, DocumentNumberConflict, NotFoundError, ValidationError
from billing.extensions import db
from billing.models.client import Client
from billing.models.delivery_note import DeliveryNote, DeliveryNoteStatus
from billing.models.document import DocumentLine, to_decimal
from billing.models.invoice import Invoice, InvoiceStatus
from billing.models.payment import PaymentStatus
from billing.models.product import Product
from billing.models.quote import Quote, QuoteStatus
from billing.services.numbering import assign_unique_number, max_attempts, number_exists
from billing.services.pdf_renderer import DocumentRenderer
from billing.services.settings_store import SettingsStore
from billing.services.totals import TAX_RATE, calculate_document_totals, calculate_line_total
from billing.validation import (
    is_blank, parse_bool, parse_date, parse_decimal, parse_enum, parse_int, parse_percent,
    parse_str, require_fields,
)

logger = logging.getLogger(__name__)


def get_client(client_id):
    client = db.session.get(Client, parse_int(client_id, 'clientId'))
    if client is None:
        raise NotFoundError('Client non trouvé')
    return client


def refresh_client_total(client_id):
    """Recompute ``total_invoiced`` as the sum of the client's invoice totals."""
    client = db.session.get(Client, client_id)
    if client is None:
        return
    invoices = Invoice.query.filter_by(client_id=client_id).all()
    client.total_invoiced = sum((to_decimal(inv.total) for inv in invoices), Decimal('0'))
    db.session.commit()


class DocumentService:
    model = None
    status_enum = None

    # Kind-specific second date: (request key, model attribute)
    second_date = None

    has_totals = True
    line_discounts = True

    not_found_message = 'Document non trouvé'

    # ---------- Queries ----------

    @classmethod
    def list(cls, status=None):
        query = cls.model.query
        if status is not None:
            query = query.filter(cls.model.status == parse_enum(cls.status_enum, status, 'statut'))
        return query.order_by(cls.model.issue_date.desc(), cls.model.id.desc()).all()

    @classmethod
    def get(cls, document_id):
        document = db.session.get(cls.model, document_id)
        if document is None:
            raise NotFoundError(cls.not_found_message)
        return document

    # ---------- Lines and totals ----------

    @classmethod
    def build_lines(cls, payload_lines):
        if not isinstance(payload_lines, list) or not payload_lines:
            raise ValidationError('Au moins une ligne est requise', field='lignes')

        lines = []
        for position, item in enumerate(payload_lines):
            prefix = f'lignes[{position}]'
            if not isinstance(item, dict):
                raise ValidationError(f'{prefix} doit être un objet', field=prefix)

            missing = [f'{prefix}.{key}' for key in ('produitId', 'quantite', 'prixUnitaire') if is_blank(item.get(key))]
            if missing:
                raise ValidationError.missing(missing)

            product = db.session.get(Product, parse_int(item['produitId'], f'{prefix}.produitId'))
            if product is None:
                raise NotFoundError(f"Produit {item['produitId']} non trouvé")

            quantity = parse_int(item['quantite'], f'{prefix}.quantite', minimum=1)
            unit_price = parse_decimal(item['prixUnitaire'], f'{prefix}.prixUnitaire', minimum=0)
            discount = parse_percent(item.get('remise'), f'{prefix}.remise') if cls.line_discounts else Decimal('0')

            lines.append(DocumentLine(
                position=position,
                product_id=product.id,
                product_name=product.name,
                product_description=product.description,
                quantity=quantity,
                unit_price=unit_price,
                discount_percent=discount,
                line_total=calculate_line_total(quantity, unit_price, discount),
            ))
        return lines

    @classmethod
    def refresh_totals(cls, document):
        """Recompute every stored total from the document's current lines."""
        if not cls.has_totals:
            return
        totals = calculate_document_totals(
            [
                {
                    'quantity': line.quantity,
                    'unit_price': line.unit_price,
                    'discount_percent': line.discount_percent,
                }
                for line in document.lines
            ],
            global_discount_percent=document.global_discount_percent,
            tax_enabled=document.tax_enabled,
            tax_rate=current_app.config.get('TAX_RATE', TAX_RATE),
        )
        document.apply_totals(totals, document.global_discount_percent, document.tax_enabled)

    # ---------- Header fields ----------

    @classmethod
    def apply_header(cls, document, data, partial=False):
        key, attr = cls.second_date
        if not is_blank(data.get('dateCreation')):
            document.issue_date = parse_date(data['dateCreation'], 'dateCreation')
        if key in data or not partial:
            setattr(document, attr, parse_date(data.get(key), key))
        if not is_blank(data.get('statut')):
            document.status = parse_enum(cls.status_enum, data['statut'], 'statut')
        if 'notes' in data:
            document.notes = parse_str(data['notes'], 'notes', strip=False)

        if cls.has_totals:
            if 'remiseTotale' in data or not partial:
                document.global_discount_percent = parse_percent(data.get('remiseTotale'), 'remiseTotale')
            if 'appliquerTVA' in data or not partial:
                document.tax_enabled = parse_bool(data.get('appliquerTVA'), default=True)

    @classmethod
    def after_write(cls, client_ids):
        """Hook run after a commit touching documents of ``client_ids``."""

    # ---------- Create / update / delete ----------

    @classmethod
    def create(cls, data):
        require_fields(data, ['clientId', cls.second_date[0]])
        client = get_client(data['clientId'])

        document = cls.model(client_id=client.id, client_name=client.name)
        cls.apply_header(document, data)
        document.lines = cls.build_lines(data.get('lignes'))
        cls.refresh_totals(document)
        document.number = assign_unique_number(
            cls.model, parse_str(data.get('numero'), 'numero'), cls.model.PREFIX)

        cls._insert(document)
        cls.after_write({client.id})
        logger.info('Created %s %s for client %s', cls.model.KIND, document.number, client.id)
        return document

    @classmethod
    def _insert(cls, document):
        # The UNIQUE constraint on number closes the gap between the
        # existence check above and the insert; a lost race regenerates.
        attempts = max_attempts()
        for attempt in range(1, attempts + 1):
            db.session.add(document)
            try:
                db.session.commit()
                return
            except IntegrityError:
                db.session.rollback()
                if not number_exists(cls.model, document.number):
                    raise
                logger.warning('Number %s taken concurrently (attempt %d)', document.number, attempt)
                document.number = assign_unique_number(cls.model, None, cls.model.PREFIX)
        raise DocumentNumberConflict()

    @classmethod
    def update(cls, document, data):
        client_ids = {document.client_id}

        # A duplicate number must surface at commit, not from a lazy load
        with db.session.no_autoflush:
            if not is_blank(data.get('clientId')) and parse_int(data['clientId'], 'clientId') != document.client_id:
                client = get_client(data['clientId'])
                document.client_id = client.id
                document.client_name = client.name
                client_ids.add(client.id)

            number = parse_str(data.get('numero'), 'numero')
            if number and number != document.number:
                document.number = assign_unique_number(
                    cls.model, number, cls.model.PREFIX, exclude_id=document.id)

            cls.apply_header(document, data, partial=True)
            if 'lignes' in data:
                document.lines = cls.build_lines(data['lignes'])
            cls.refresh_totals(document)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError('Ce numéro de document existe déjà')

        cls.after_write(client_ids)
        logger.info('Updated %s %s', cls.model.KIND, document.number)
        return document

    @classmethod
    def delete(cls, document):
        client_id, number = document.client_id, document.number
        db.session.delete(document)
        db.session.commit()
        cls.after_write({client_id})
        logger.info('Deleted %s %s', cls.model.KIND, number)

    # ---------- PDF ----------

    @classmethod
    def render(cls, document):
        client = db.session.get(Client, document.client_id)
        if client is None:
            raise NotFoundError('Client non trouvé')
        renderer = DocumentRenderer(SettingsStore(), engine=current_app.config.get('PDF_ENGINE'))
        return renderer.render_pdf(document, client)


class InvoiceService(DocumentService):
    model = Invoice
    status_enum = InvoiceStatus
    second_date = ('dateEcheance', 'due_date')
    not_found_message = 'Facture non trouvée'

    @classmethod
    def after_write(cls, client_ids):
        for client_id in client_ids:
            refresh_client_total(client_id)

    @classmethod
    def details(cls, invoice):
        """Invoice with its payments and what is left to pay.

        Only confirmed payments count; overpayment is not prevented.
        """
        paid = sum(
            (to_decimal(p.amount) for p in invoice.payments if p.status == PaymentStatus.CONFIRMED),
            Decimal('0'),
        )
        data = invoice.to_dict()
        data['paiements'] = [payment.to_dict() for payment in invoice.payments]
        data['montantPaye'] = float(paid)
        data['resteAPayer'] = float(to_decimal(invoice.total) - paid)
        return data


class QuoteService(DocumentService):
    model = Quote
    status_enum = QuoteStatus
    second_date = ('dateExpiration', 'expiration_date')
    not_found_message = 'Devis non trouvé'

    @classmethod
    def apply_header(cls, document, data, partial=False):
        super().apply_header(document, data, partial)
        if 'conditionsReglement' in data:
            document.payment_terms = parse_str(data['conditionsReglement'], 'conditionsReglement', strip=False)


class DeliveryNoteService(DocumentService):
    model = DeliveryNote
    status_enum = DeliveryNoteStatus
    second_date = ('dateLivraison', 'delivery_date')
    has_totals = False
    line_discounts = False
    not_found_message = 'Bon de livraison non trouvé'
