from tests.conftest import API


def _create_invoice(http, payload):
    resp = http.post(f'{API}/factures/', json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['data']


def test_create_invoice_computes_totals(auth_client, invoice_payload):
    resp = auth_client.post(f'{API}/factures/', json=invoice_payload())
    body = resp.get_json()

    assert resp.status_code == 201
    assert body['success'] is True
    assert body['message'] == 'Facture créée avec succès'
    data = body['data']
    assert data['numero'] == 'F-2025-0001'
    assert data['statut'] == 'brouillon'
    assert data['dateCreation'] == '2025-01-31'
    assert data['dateEcheance'] == '2025-02-28'
    assert data['sousTotal'] == 180
    assert data['remiseMontant'] == 18
    assert data['sousTotalApresRemise'] == 162
    assert data['tva'] == 30.78
    assert data['total'] == 192.78
    assert [line['total'] for line in data['lignes']] == [90, 90]


def test_edit_recomputes_totals(auth_client, invoice_payload):
    payload = invoice_payload()
    invoice = _create_invoice(auth_client, payload)
    url = f"{API}/factures/{invoice['id']}"

    # Same content twice gives the same totals
    same = auth_client.put(url, json=payload).get_json()['data']
    assert same['total'] == 192.78

    notes_only = auth_client.put(url, json={'notes': 'Relance'}).get_json()['data']
    assert notes_only['total'] == 192.78
    assert notes_only['remiseTotale'] == 10

    no_discount = auth_client.put(url, json={'remiseTotale': 0}).get_json()['data']
    assert no_discount['total'] == 214.2

    no_tax = auth_client.put(url, json={'appliquerTVA': False}).get_json()['data']
    assert no_tax['tva'] == 0
    assert no_tax['total'] == 180

    lines = [dict(payload['lignes'][1], quantite=2)]
    fewer_lines = auth_client.put(url, json={'lignes': lines}).get_json()['data']
    assert len(fewer_lines['lignes']) == 1
    assert fewer_lines['sousTotal'] == 180
    assert fewer_lines['total'] == 180


def test_lines_keep_product_and_client_snapshot(auth_client, invoice_payload):
    payload = invoice_payload()
    invoice = _create_invoice(auth_client, payload)
    original_name = invoice['lignes'][0]['produitNom']

    product_id = payload['lignes'][0]['produitId']
    assert auth_client.put(f'{API}/produits/{product_id}', json={'nom': 'Nouveau nom'}).status_code == 200
    assert auth_client.put(f"{API}/clients/{payload['clientId']}", json={'nom': 'Autre nom'}).status_code == 200

    data = auth_client.get(f"{API}/factures/{invoice['id']}").get_json()['data']
    assert data['lignes'][0]['produitNom'] == original_name
    assert data['clientNom'] == invoice['clientNom']


def test_client_total_follows_invoices(auth_client, invoice_payload):
    payload = invoice_payload()
    invoice = _create_invoice(auth_client, payload)
    client_url = f"{API}/clients/{payload['clientId']}"

    assert auth_client.get(client_url).get_json()['data']['totalFacture'] == 192.78

    auth_client.put(f"{API}/factures/{invoice['id']}", json={'appliquerTVA': False})
    assert auth_client.get(client_url).get_json()['data']['totalFacture'] == 162

    assert auth_client.delete(f"{API}/factures/{invoice['id']}").status_code == 200
    assert auth_client.get(client_url).get_json()['data']['totalFacture'] == 0


def test_create_requires_client_and_lines(auth_client, invoice_payload):
    payload = invoice_payload()

    missing = auth_client.post(f'{API}/factures/', json=dict(payload, clientId=None))
    assert missing.status_code == 400
    assert missing.get_json()['missingFields'] == ['clientId']

    no_lines = auth_client.post(f'{API}/factures/', json=dict(payload, lignes=[]))
    assert no_lines.status_code == 400

    unknown_client = auth_client.post(f'{API}/factures/', json=dict(payload, clientId=9999))
    assert unknown_client.status_code == 404

    bad_line = dict(payload['lignes'][0], produitId=9999)
    unknown_product = auth_client.post(f'{API}/factures/', json=dict(payload, lignes=[bad_line]))
    assert unknown_product.status_code == 404
    assert unknown_product.get_json()['message'] == 'Produit 9999 non trouvé'

    bad_quantity = dict(payload['lignes'][0], quantite=0)
    assert auth_client.post(f'{API}/factures/', json=dict(payload, lignes=[bad_quantity])).status_code == 400

    assert auth_client.get(f'{API}/factures/').get_json()['data'] == []


def test_invoice_status_filter(auth_client, invoice_payload):
    invoice = _create_invoice(auth_client, invoice_payload())
    auth_client.put(f"{API}/factures/{invoice['id']}", json={'statut': 'envoyee'})

    sent = auth_client.get(f'{API}/factures/status/envoyee').get_json()['data']
    assert [inv['id'] for inv in sent] == [invoice['id']]
    assert auth_client.get(f'{API}/factures/status/brouillon').get_json()['data'] == []
    assert auth_client.get(f'{API}/factures/status/inconnu').status_code == 400


def test_invoice_details_counts_confirmed_payments(auth_client, invoice_payload):
    invoice = _create_invoice(auth_client, invoice_payload())
    auth_client.post(f'{API}/paiements/', json={'factureId': invoice['id'], 'montant': 100, 'statut': 'confirme'})
    auth_client.post(f'{API}/paiements/', json={'factureId': invoice['id'], 'montant': 50})

    data = auth_client.get(f"{API}/factures/{invoice['id']}/details").get_json()['data']
    assert len(data['paiements']) == 2
    assert data['montantPaye'] == 100
    assert data['resteAPayer'] == 92.78


def test_missing_document_is_404(auth_client):
    for path in ('factures', 'devis', 'bons-livraison'):
        resp = auth_client.get(f'{API}/{path}/42')
        assert resp.status_code == 404
        assert resp.get_json()['success'] is False


def test_invoice_pdf_download(auth_client, invoice_payload):
    invoice = _create_invoice(auth_client, invoice_payload())
    resp = auth_client.get(f"{API}/factures/{invoice['id']}/pdf")

    assert resp.status_code == 200
    assert resp.mimetype == 'application/pdf'
    assert 'facture-F-2025-0001.pdf' in resp.headers['Content-Disposition']
    assert resp.data.startswith(b'%PDF')
    assert '192,780 DT'.encode('utf-8') in resp.data


def test_pdf_failure_returns_json_error(app, auth_client, invoice_payload):
    invoice = _create_invoice(auth_client, invoice_payload())

    def broken(html):
        raise OSError('cannot load fonts')

    app.config['PDF_ENGINE'] = broken
    resp = auth_client.get(f"{API}/factures/{invoice['id']}/pdf")

    assert resp.status_code == 500
    assert resp.get_json() == {'success': False, 'message': 'Erreur lors de la génération du PDF'}


def test_pdf_uses_company_settings(admin_client, auth_client, invoice_payload):
    invoice = _create_invoice(auth_client, invoice_payload())
    admin_client.put(f'{API}/settings/', json={'company': {'name': 'NG Services SARL'}})

    resp = auth_client.get(f"{API}/factures/{invoice['id']}/pdf")
    assert b'NG Services SARL' in resp.data


def test_quote_lifecycle(auth_client, invoice_payload):
    payload = invoice_payload(numero='D-2025-0001', appliquerTVA=False, remiseTotale=0,
                              conditionsReglement='30 jours')
    payload.pop('dateEcheance')
    payload['dateExpiration'] = '2025-03-02'
    payload['lignes'] = [dict(payload['lignes'][0], quantite=1, prixUnitaire='169.22', remise=0)]

    resp = auth_client.post(f'{API}/devis/', json=payload)
    assert resp.status_code == 201
    quote = resp.get_json()['data']
    assert quote['total'] == 169.22
    assert quote['conditionsReglement'] == '30 jours'
    assert quote['dateExpiration'] == '2025-03-02'

    updated = auth_client.put(f"{API}/devis/{quote['id']}", json={'statut': 'accepte'}).get_json()['data']
    assert updated['statut'] == 'accepte'

    pdf = auth_client.get(f"{API}/devis/{quote['id']}/pdf")
    assert 'devis-D-2025-0001.pdf' in pdf.headers['Content-Disposition']
    assert 'CENT SOIXANTE-NEUF DINARS ET 220 MILLIMES'.encode('utf-8') in pdf.data

    assert auth_client.delete(f"{API}/devis/{quote['id']}").status_code == 200
    assert auth_client.get(f'{API}/devis/').get_json()['data'] == []


def test_quote_requires_expiration_date(auth_client, invoice_payload):
    payload = invoice_payload()
    payload.pop('dateEcheance')
    resp = auth_client.post(f'{API}/devis/', json=payload)
    assert resp.status_code == 400
    assert resp.get_json()['missingFields'] == ['dateExpiration']


def test_delivery_note_has_no_monetary_totals(auth_client, invoice_payload):
    payload = invoice_payload(numero='BL-2025-0001')
    payload.pop('dateEcheance')
    payload['dateLivraison'] = '2025-02-03'

    resp = auth_client.post(f'{API}/bons-livraison/', json=payload)
    assert resp.status_code == 201
    note = resp.get_json()['data']
    assert note['statut'] == 'prepare'
    assert note['dateLivraison'] == '2025-02-03'
    assert 'total' not in note
    assert 'tva' not in note
    # Line discounts do not apply to delivery notes
    assert note['lignes'][0]['remise'] == 0
    assert note['lignes'][0]['total'] == 100

    shipped = auth_client.put(f"{API}/bons-livraison/{note['id']}", json={'statut': 'livree'})
    assert shipped.get_json()['data']['statut'] == 'livree'

    pdf = auth_client.get(f"{API}/bons-livraison/{note['id']}/pdf")
    assert 'bon-livraison-BL-2025-0001.pdf' in pdf.headers['Content-Disposition']
    assert b'Total TTC' not in pdf.data


def test_non_string_number_is_rejected(auth_client, invoice_payload):
    payload = invoice_payload()
    resp = auth_client.post(f'{API}/factures/', json=dict(payload, numero=12345))
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'numero'
    assert auth_client.get(f'{API}/factures/').get_json()['data'] == []

    invoice = _create_invoice(auth_client, payload)
    resp = auth_client.put(f"{API}/factures/{invoice['id']}", json={'numero': 99})
    assert resp.status_code == 400
    assert resp.get_json()['field'] == 'numero'
    assert auth_client.get(f"{API}/factures/{invoice['id']}").get_json()['data']['numero'] == 'F-2025-0001'
