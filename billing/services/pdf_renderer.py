"""HTML rendering of stored documents and conversion to PDF bytes."""
import logging
from decimal import Decimal
from typing import NamedTuple

from flask import current_app, render_template

from billing.errors import PdfGenerationError
from billing.services.totals import TAX_RATE

logger = logging.getLogger(__name__)

PDF_TEMPLATES = {
    'facture': 'pdf/facture.html',
    'devis': 'pdf/devis.html',
    'bon-livraison': 'pdf/bon_livraison.html',
}

TITLES = {
    'facture': 'Facture',
    'devis': 'Devis',
    'bon-livraison': 'Bon de livraison',
}


class RenderedDocument(NamedTuple):
    content: bytes
    filename: str
    mimetype: str = 'application/pdf'


def weasyprint_engine(html: str) -> bytes:
    from weasyprint import HTML
    return HTML(string=html).write_pdf()


class DocumentRenderer:

    def __init__(self, settings_store, engine=None):
        self.settings_store = settings_store
        self.engine = engine or weasyprint_engine

    def context(self, document, client) -> dict:
        company = self.settings_store.company()
        rate = Decimal(str(current_app.config.get('TAX_RATE', TAX_RATE)))
        return {
            'kind': document.KIND,
            'title': TITLES[document.KIND],
            'document': document,
            'lines': list(document.lines),
            'client': client,
            'company': company,
            'bank': company.get('bank') or {},
            'tax_rate_percent': rate * 100,
        }

    def render_html(self, document, client) -> str:
        return render_template(PDF_TEMPLATES[document.KIND], **self.context(document, client))

    def render_pdf(self, document, client) -> RenderedDocument:
        logger.info('Generating PDF for %s %s', document.KIND, document.number)
        try:
            html = self.render_html(document, client)
            content = self.engine(html)
        except Exception as exc:
            logger.exception('PDF generation failed for %s %s', document.KIND, document.number)
            raise PdfGenerationError() from exc

        return RenderedDocument(content=content, filename=f"{document.KIND}-{document.number}.pdf")
