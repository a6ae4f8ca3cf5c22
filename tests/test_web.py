from decimal import Decimal

import pytest

from loan_schedule import engine
from loan_schedule.config import AppConfig
from loan_schedule.validation import ERROR_MESSAGES, TERM_TOO_LONG
from loan_schedule_web.app import create_app

BOM = b"\xef\xbb\xbf"


@pytest.fixture
def client():
    app = create_app(AppConfig(secret_key="test", preview_rows=24))
    app.config["TESTING"] = True
    return app.test_client()


def _form(**overrides):
    form = {
        "amount": "100000",
        "rate": "5",
        "years": "1",
        "frequency": "12",
        "method": "amortized",
        "extra": "",
    }
    form.update(overrides)
    return form


class TestIndex:
    def test_get_renders_empty_form(self, client):
        response = client.get("/")
        body = response.get_data(as_text=True)
        assert response.status_code == 200
        assert 'id="loan-form"' in body
        assert 'id="results-panel"' not in body

    def test_post_shows_summary_and_schedule(self, client):
        response = client.post("/", data=_form())
        body = response.get_data(as_text=True)
        assert response.status_code == 200
        assert "¥8,560.75" in body
        assert '<td id="payoff-time">1年</td>' in body
        assert body.count("<tr>\n          <td>") == 12

    def test_long_schedule_truncated(self, client):
        response = client.post("/", data=_form(years="5"))
        body = response.get_data(as_text=True)
        assert "另有 36 期未显示" in body
        assert body.count("<tr>\n          <td>") == 24

    def test_full_schedule(self, client):
        response = client.post("/", data=_form(years="5", show_full_schedule="1"))
        body = response.get_data(as_text=True)
        assert "truncate-note" not in body
        assert body.count("<tr>\n          <td>") == 60

    def test_field_errors_hide_results(self, client):
        response = client.post("/", data=_form(amount="0", rate="101"))
        body = response.get_data(as_text=True)
        assert response.status_code == 400
        assert ERROR_MESSAGES["amount"] in body
        assert ERROR_MESSAGES["rate"] in body
        assert 'id="results-panel"' not in body

    def test_blank_method_is_amortized(self, client):
        response = client.post("/", data=_form(method=""))
        assert "¥8,560.75" in response.get_data(as_text=True)

    def test_equal_principal_range(self, client):
        response = client.post("/", data=_form(amount="120000", rate="12", method="equal_principal"))
        assert "¥11,200.00 → ¥10,100.00" in response.get_data(as_text=True)

    def test_non_convergence_warning(self, client, monkeypatch):
        monkeypatch.setattr(engine, "_calculate_annuity_payment", lambda *args: Decimal("1"))
        response = client.post("/", data=_form(rate="50"))
        body = response.get_data(as_text=True)
        assert response.status_code == 200
        assert 'class="calculation-warning"' in body
        assert 'id="results-panel"' not in body

    def test_integral_frequency_string(self, client):
        response = client.post("/", data=_form(frequency="12.0"))
        body = response.get_data(as_text=True)
        assert response.status_code == 200
        assert 'id="results-panel"' in body
        assert "¥8,560.75" in body

    def test_fractional_frequency(self, client):
        response = client.post("/", data=_form(frequency="12.5"))
        body = response.get_data(as_text=True)
        assert response.status_code == 400
        assert ERROR_MESSAGES["frequency"] in body
        assert 'id="results-panel"' not in body

    @pytest.mark.parametrize("years", ["1e30", "1e6"])
    def test_term_too_long(self, client, years):
        response = client.post("/", data=_form(years=years))
        assert response.status_code == 400
        assert TERM_TOO_LONG in response.get_data(as_text=True)

    def test_reset(self, client):
        response = client.post("/", data=_form(action="reset"))
        body = response.get_data(as_text=True)
        assert 'id="results-panel"' not in body
        assert 'value="100000"' not in body


class TestCsvExport:
    def test_download(self, client):
        response = client.post("/export.csv", data=_form(amount="12000", rate="0"))
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        assert "attachment; filename=loan_schedule_" in response.headers["Content-Disposition"]

        body = response.get_data()
        assert body.startswith(BOM)
        lines = body[len(BOM):].decode("utf-8").split("\n")
        assert lines[0] == "期数,当期还款,本金,利息,剩余本金"
        assert lines[-1] == "12,1000.00,1000.00,0.00,0.00"

    def test_invalid_form(self, client):
        response = client.post("/export.csv", data=_form(years="0"))
        assert response.status_code == 400
        assert response.get_json() == {"errors": {"years": ERROR_MESSAGES["years"]}}

    def test_non_convergence(self, client, monkeypatch):
        monkeypatch.setattr(engine, "_calculate_annuity_payment", lambda *args: Decimal("1"))
        response = client.post("/export.csv", data=_form(rate="50"))
        assert response.status_code == 422
        assert "warning" in response.get_json()

    def test_term_too_long(self, client):
        response = client.post("/export.csv", data=_form(years="1e30"))
        assert response.status_code == 400
        assert response.get_json() == {"errors": {"years": TERM_TOO_LONG}}
