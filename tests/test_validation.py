import pytest

from herb_ledger.errors import InvalidRecord
from herb_ledger.models import Herb
from herb_ledger.settings import Settings
from herb_ledger.validation import OpaqueFieldValidator, StrictFieldValidator


class TestOpaqueFieldValidator:

    def test_accepts_anything_with_an_id(self):
        OpaqueFieldValidator().validate(Herb(herb_id="H1", latitude="??", quantity="lots"))

    def test_requires_id(self):
        with pytest.raises(InvalidRecord) as exc:
            OpaqueFieldValidator().validate(Herb())
        assert exc.value.field == "herbID"


class TestStrictFieldValidator:

    def test_empty_optional_fields_pass(self):
        StrictFieldValidator().validate(Herb(herb_id="H1"))

    @pytest.mark.parametrize("planting_date", ["2025-01-15", "2025-01-15T06:30:00Z"])
    def test_dates(self, planting_date):
        StrictFieldValidator().validate(Herb(herb_id="H1", planting_date=planting_date))

    @pytest.mark.parametrize("field,kwargs", [
        ("plantingDate", {"planting_date": "15/01/2025"}),
        ("harvestDate", {"harvest_date": "soon"}),
        ("latitude", {"latitude": "91"}),
        ("latitude", {"latitude": "north"}),
        ("longitude", {"longitude": "-180.5"}),
        ("quantity", {"quantity": "-1"}),
        ("quantity", {"quantity": "nan"}),
        ("latitude", {"latitude": "inf"}),
        ("longitude", {"longitude": "-Infinity"}),
    ])
    def test_rejects(self, field, kwargs):
        with pytest.raises(InvalidRecord) as exc:
            StrictFieldValidator().validate(Herb(herb_id="H1", **kwargs))
        assert exc.value.field == field


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("HERB_LEDGER_STATE", "HERB_LEDGER_FILE", "HERB_LEDGER_STRICT_VALIDATION",
                     "HERB_LEDGER_LOG_LEVEL", "HERB_LEDGER_PORT"):
            monkeypatch.delenv(name, raising=False)
        s = Settings.load()
        assert s.ledger_path.endswith("ledger.jsonl")
        assert isinstance(s.validator(), OpaqueFieldValidator)
        assert not isinstance(s.validator(), StrictFieldValidator)
        assert s.PORT == 8080

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HERB_LEDGER_STATE", str(tmp_path))
        monkeypatch.setenv("HERB_LEDGER_STRICT_VALIDATION", "yes")
        monkeypatch.setenv("HERB_LEDGER_LOG_LEVEL", "debug")
        monkeypatch.setenv("HERB_LEDGER_PORT", "9090")
        s = Settings.load()
        assert s.STATE_DIR == str(tmp_path)
        assert isinstance(s.validator(), StrictFieldValidator)
        assert s.LOG_LEVEL == "DEBUG"
        assert s.PORT == 9090

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("HERB_LEDGER_PORT", "eighty")
        with pytest.raises(RuntimeError):
            Settings.load()
