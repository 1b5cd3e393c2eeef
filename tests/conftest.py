import pytest

from billing import create_app
from billing.config import TestingConfig
from billing.extensions import db
from billing.models.user import User

API = '/api/v1'


def fake_pdf_engine(html):
    # Echo the HTML so tests can inspect what would have been printed
    return b'%PDF-fake\n' + html.encode('utf-8')


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.config['PDF_ENGINE'] = fake_pdf_engine
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(email='user@ngbilling.tn', password='secret123', role='user', active=True, name='Utilisateur'):
        with app.app_context():
            user = User(email=email, name=name, role=role, active=active)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


def login(http, email, password):
    return http.post(f'{API}/auth/login', json={'email': email, 'password': password})


@pytest.fixture
def auth_client(app, make_user):
    make_user(email='user@ngbilling.tn', password='secret123')
    http = app.test_client()
    assert login(http, 'user@ngbilling.tn', 'secret123').status_code == 200
    return http


@pytest.fixture
def admin_client(app, make_user):
    make_user(email='admin@ngbilling.tn', password='admin123', role='admin', name='Admin')
    http = app.test_client()
    assert login(http, 'admin@ngbilling.tn', 'admin123').status_code == 200
    return http


@pytest.fixture
def create_client(auth_client):
    counter = {'n': 0}

    def _create(**overrides):
        counter['n'] += 1
        payload = {
            'nom': f"Client {counter['n']}",
            'email': f"client{counter['n']}@example.tn",
            'telephone': '+216 71 000 000',
            'adresse': '12 rue de Marseille',
            'ville': 'Tunis',
            'codePostal': '1000',
            'pays': 'Tunisie',
        }
        payload.update(overrides)
        resp = auth_client.post(f'{API}/clients/', json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']
    return _create


@pytest.fixture
def create_product(auth_client):
    counter = {'n': 0}

    def _create(**overrides):
        counter['n'] += 1
        payload = {
            'nom': f"Produit {counter['n']}",
            'description': 'Description produit',
            'prix': 50,
            'categorie': 'Informatique',
        }
        payload.update(overrides)
        resp = auth_client.post(f'{API}/produits/', json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['data']
    return _create


@pytest.fixture
def invoice_payload(create_client, create_product):
    """Two lines: 2 x 50 at -10 % and 1 x 90, 10 % global discount, TVA on."""
    def _payload(**overrides):
        customer = create_client()
        first = create_product(prix=50)
        second = create_product(prix=90)
        payload = {
            'numero': 'F-2025-0001',
            'clientId': customer['id'],
            'dateCreation': '2025-01-31',
            'dateEcheance': '2025-02-28',
            'lignes': [
                {'produitId': first['id'], 'quantite': 2, 'prixUnitaire': 50, 'remise': 10},
                {'produitId': second['id'], 'quantite': 1, 'prixUnitaire': 90},
            ],
            'remiseTotale': 10,
            'appliquerTVA': True,
        }
        payload.update(overrides)
        return payload
    return _payload
