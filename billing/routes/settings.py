from flask import Blueprint
from flask_login import login_required

from billing.errors import api_response
from billing.security import role_required
from billing.services.settings_store import SettingsStore
from billing.validation import json_body

bp = Blueprint('settings', __name__)


@bp.route('/', methods=['GET'])
@login_required
def show():
    return api_response(SettingsStore().get())


@bp.route('/', methods=['PUT'])
@role_required('admin')
def update():
    data = SettingsStore().update(json_body())
    return api_response(data, 'Paramètres mis à jour avec succès')
