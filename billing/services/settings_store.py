from billing.extensions import db
from billing.models.settings import Settings


class SettingsStore:
    """Read/write access to the single settings row.

    The renderer receives a store instance instead of querying the table
    itself, so it can be handed a :class:`StaticSettingsStore` in isolation.
    """

    def _row(self) -> Settings:
        row = Settings.query.first()
        if row is None:
            row = Settings(data={})
            db.session.add(row)
            db.session.commit()
        return row

    def get(self) -> dict:
        return dict(self._row().data or {})

    def update(self, patch: dict) -> dict:
        """Shallow merge of ``patch`` into the stored settings."""
        row = self._row()
        data = dict(row.data or {})
        data.update(patch or {})
        row.data = data
        db.session.commit()
        return data

    def company(self) -> dict:
        return self.get().get('company') or {}


class StaticSettingsStore(SettingsStore):
    """In-memory settings, used by scripts and tests."""

    def __init__(self, data: dict = None):
        self.data = dict(data or {})

    def get(self) -> dict:
        return dict(self.data)

    def update(self, patch: dict) -> dict:
        self.data.update(patch or {})
        return dict(self.data)
