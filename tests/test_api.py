import unittest
from unittest import mock

from fastapi.testclient import TestClient

from alphasignal.main import app
from alphasignal.state import poller, signal_service, store


class TestApi(unittest.TestCase):
    def setUp(self):
        # No `with`: startup hooks (and the network poller) do not run.
        self.client = TestClient(app)

    def test_health(self):
        body = self.client.get("/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["active_asset"], poller.active_asset.id)

    def test_assets(self):
        body = self.client.get("/assets").json()
        self.assertEqual([a["id"] for a in body], ["BTCUSD", "XAUUSD", "USOIL"])
        self.assertEqual(sum(a["active"] for a in body), 1)

    def test_market_snapshot_shape(self):
        body = self.client.get("/market").json()
        self.assertEqual(body["asset"], poller.active_asset.id)
        for key in ("is_live", "source", "candles", "metrics", "fresh", "last_signal"):
            self.assertIn(key, body)

    def test_unknown_asset_is_404(self):
        resp = self.client.post("/market/select", params={"asset": "DOGEUSD"})
        self.assertEqual(resp.status_code, 404)

    def test_signal_is_kept_with_the_snapshot(self):
        self.addCleanup(store.clear)
        with mock.patch.object(signal_service, "api_key", ""):
            resp = self.client.post("/signal")
        self.assertEqual(resp.json()["signal"]["type"], "HOLD")

        body = self.client.get("/market").json()
        self.assertEqual(body["last_signal"]["type"], "HOLD")
        self.assertEqual(body["last_signal"], resp.json()["signal"])


if __name__ == "__main__":
    unittest.main()
