import re
from datetime import date

import pytest

from billing.errors import DocumentNumberConflict
from billing.extensions import db
from billing.models.client import Client
from billing.models.invoice import Invoice
from billing.services import numbering
from billing.services.numbering import assign_unique_number, generate_number

from tests.conftest import API


@pytest.fixture
def existing_invoice(app):
    with app.app_context():
        customer = Client(code='CLT-00001', name='ACME', email='acme@example.tn', phone='1',
                          address='a', city='Tunis', postal_code='1000', country='Tunisie')
        db.session.add(customer)
        db.session.flush()
        invoice = Invoice(number='F-2025-0001', client_id=customer.id, client_name=customer.name,
                          due_date=date(2025, 2, 28))
        db.session.add(invoice)
        db.session.commit()
        return invoice.id


def test_generated_number_format():
    assert re.match(r'^F-\d{4}-\d{4}$', generate_number('F'))
    assert generate_number('BL', year=2024).startswith('BL-2024-')


def test_free_number_is_kept(app, existing_invoice):
    with app.app_context():
        assert assign_unique_number(Invoice, ' F-2025-0002 ', 'F') == 'F-2025-0002'


def test_blank_number_is_generated(app, existing_invoice):
    with app.app_context():
        assert re.match(r'^F-\d{4}-\d{4}$', assign_unique_number(Invoice, '', 'F'))


def test_taken_number_is_regenerated(app, existing_invoice):
    with app.app_context():
        number = assign_unique_number(Invoice, 'F-2025-0001', 'F')
    assert number != 'F-2025-0001'
    assert number.startswith('F-')


def test_own_number_is_not_a_collision(app, existing_invoice):
    with app.app_context():
        assert assign_unique_number(Invoice, 'F-2025-0001', 'F', exclude_id=existing_invoice) == 'F-2025-0001'


def test_regeneration_is_bounded(app, existing_invoice, monkeypatch):
    calls = []

    def always_taken(prefix, year=None):
        calls.append(prefix)
        return 'F-2025-0001'

    monkeypatch.setattr(numbering, 'generate_number', always_taken)
    with app.app_context():
        with pytest.raises(DocumentNumberConflict):
            assign_unique_number(Invoice, 'F-2025-0001', 'F', attempts=5)
    assert len(calls) == 5


def test_duplicate_number_on_create_gets_new_number(auth_client, invoice_payload):
    payload = invoice_payload()
    first = auth_client.post(f'{API}/factures/', json=payload)
    second = auth_client.post(f'{API}/factures/', json=payload)

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.get_json()['data']['numero'] == 'F-2025-0001'
    assert second.get_json()['data']['numero'] != 'F-2025-0001'


def test_create_fails_cleanly_when_no_number_is_free(app, auth_client, invoice_payload, monkeypatch):
    payload = invoice_payload()
    assert auth_client.post(f'{API}/factures/', json=payload).status_code == 201

    monkeypatch.setattr(numbering, 'generate_number', lambda prefix, year=None: 'F-2025-0001')
    app.config['DOCUMENT_NUMBER_MAX_ATTEMPTS'] = 3
    resp = auth_client.post(f'{API}/factures/', json=payload)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body['success'] is False
    assert body['message'] == 'Impossible de générer un numéro de document unique'
    assert len(auth_client.get(f'{API}/factures/').get_json()['data']) == 1


def _stale_check(monkeypatch, misses=1):
    """Make the first ``misses`` existence checks miss rows another writer inserted."""
    real = numbering.number_exists
    state = {'misses': misses}

    def number_exists(model, number, exclude_id=None):
        if state['misses'] > 0:
            state['misses'] -= 1
            return False
        return real(model, number, exclude_id)

    monkeypatch.setattr(numbering, 'number_exists', number_exists)


def test_insert_race_regenerates_number(auth_client, invoice_payload, monkeypatch):
    payload = invoice_payload()
    assert auth_client.post(f'{API}/factures/', json=payload).status_code == 201

    _stale_check(monkeypatch)
    resp = auth_client.post(f'{API}/factures/', json=payload)

    assert resp.status_code == 201
    number = resp.get_json()['data']['numero']
    assert number != 'F-2025-0001'
    assert re.match(r'^F-\d{4}-\d{4}$', number)
    numbers = sorted(inv['numero'] for inv in auth_client.get(f'{API}/factures/').get_json()['data'])
    assert numbers == sorted(['F-2025-0001', number])


def test_update_race_on_number_is_a_conflict(auth_client, invoice_payload, monkeypatch):
    payload = invoice_payload()
    first = auth_client.post(f'{API}/factures/', json=payload).get_json()['data']
    second = auth_client.post(f'{API}/factures/', json=dict(payload, numero='F-2025-0002')).get_json()['data']

    _stale_check(monkeypatch)
    resp = auth_client.put(f"{API}/factures/{second['id']}", json={'numero': first['numero']})

    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'message': 'Ce numéro de document existe déjà'}
    assert auth_client.get(f"{API}/factures/{second['id']}").get_json()['data']['numero'] == 'F-2025-0002'
