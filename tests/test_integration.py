"""
Integration tests for Threatboard.

This module contains integration tests that run the API against a live
dashboard session.
"""

import os
import sys
import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from threatboard.main import create_app
from threatboard.api.websocket import _forward
from threatboard.collectors.location_collector import LocationCollector
from threatboard.collectors.location_provider import SimulatedLocationProvider
from threatboard.models.sample import Location, Sample, SampleOrigin
from threatboard.services.aggregation_store import AggregationStore
from threatboard.services.dashboard_session import DashboardSession


def seeded_store(levels):
    store = AggregationStore(warning_threshold=50, warning_message="High threat level detected!")
    for level in levels:
        store.append(Sample(
            threat_level=level,
            location=Location(latitude=37.7749, longitude=-122.4194),
        ))
    return store


class TestAPIIntegration(unittest.TestCase):
    """Integration tests for the API endpoints."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = seeded_store([80, 90])
        self.app = create_app(lambda: DashboardSession(self.store))

    def test_root_endpoint(self):
        with TestClient(self.app) as client:
            response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("version", response.json())

    def test_state_endpoint(self):
        with TestClient(self.app) as client:
            response = client.get("/api/dashboard/state")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["threat_level"], 85)
        self.assertEqual(data["warning_message"], "High threat level detected!")
        self.assertEqual(data["sample_count"], 2)
        self.assertEqual([s["threat_level"] for s in data["samples"]], [80, 90])
        self.assertEqual(data["samples"][0]["location"]["latitude"], 37.7749)
        self.assertEqual(data["samples"][0]["origin"], "bulk_fetch")

    def test_samples_endpoint(self):
        self.store.append(Sample(threat_level=10, origin=SampleOrigin.LOCATION))

        with TestClient(self.app) as client:
            everything = client.get("/api/dashboard/samples").json()
            page = client.get("/api/dashboard/samples", params={"skip": 1, "limit": 1}).json()
            located = client.get("/api/dashboard/samples", params={"origin": "location"}).json()

        self.assertEqual(everything["total"], 3)
        self.assertEqual([s["threat_level"] for s in page["items"]], [90])
        self.assertEqual(located["total"], 1)
        self.assertIsNone(located["items"][0]["location"])

    def test_state_without_session(self):
        client = TestClient(self.app)
        response = client.get("/api/dashboard/state")
        self.assertEqual(response.status_code, 503)

    def test_health_endpoint(self):
        with TestClient(self.app) as client:
            response = client.get("/api/health/")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "operational")
        self.assertIn("timestamp", data)
        self.assertIn("version", data)
        self.assertEqual(data["session"]["sample_count"], 2)
        self.assertEqual(data["session"]["threat_level"], 85)

    def test_health_reports_denied_location(self):
        provider = SimulatedLocationProvider(authorized=False)
        app = create_app(lambda: DashboardSession(self.store, location=LocationCollector(provider)))

        with TestClient(app) as client:
            data = client.get("/api/health/").json()

        self.assertFalse(data["session"]["location_available"])

    def test_session_stopped_on_shutdown(self):
        sessions = []

        def factory():
            sessions.append(DashboardSession(self.store))
            return sessions[-1]

        app = create_app(factory)
        with TestClient(app):
            self.assertTrue(sessions[0].running)
        self.assertFalse(sessions[0].running)


class TestWebSocketIntegration(unittest.TestCase):
    """Integration tests for the WebSocket endpoint."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = seeded_store([20, 30, 40])
        self.app = create_app(lambda: DashboardSession(self.store))

    def test_initial_state_and_ping(self):
        with TestClient(self.app) as client:
            with client.websocket_connect("/ws?client_id=tester") as websocket:
                welcome = websocket.receive_json()
                self.assertEqual(welcome["type"], "connection_established")
                self.assertEqual(welcome["client_id"], "tester")

                state = websocket.receive_json()
                self.assertEqual(state["type"], "state")
                self.assertEqual(state["data"]["threat_level"], 30)
                self.assertEqual(state["data"]["warning_message"], "")

                websocket.send_json({"type": "ping"})
                self.assertEqual(websocket.receive_json()["type"], "pong")

                websocket.send_text("not json")
                self.assertEqual(websocket.receive_json()["message"], "Invalid JSON")

    def test_pushes_state_on_append(self):
        with TestClient(self.app) as client:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()
                websocket.receive_json()

                client.portal.call(
                    self.store.append,
                    Sample(threat_level=10, origin=SampleOrigin.LOCATION),
                )

                update = websocket.receive_json()
                self.assertEqual(update["type"], "state")
                self.assertEqual(update["data"]["threat_level"], 25)
                self.assertEqual(update["data"]["sample_count"], 4)
                self.assertEqual(update["data"]["samples"][-1]["origin"], "location")

    def test_subscription_released_on_disconnect(self):
        with TestClient(self.app) as client:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()
                websocket.receive_json()
                self.assertEqual(self.store.subscriber_count, 1)
                websocket.send_json({"type": "ping"})
                websocket.receive_json()
            # Round trip so the server has processed the disconnect
            client.get("/")
        self.assertEqual(self.store.subscriber_count, 0)

    def test_append_after_disconnect(self):
        with TestClient(self.app) as client:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()
                websocket.receive_json()
            client.get("/")

            client.portal.call(
                self.store.append,
                Sample(threat_level=90, origin=SampleOrigin.LOCATION),
            )
            state = client.get("/api/dashboard/state").json()

        self.assertEqual(self.store.subscriber_count, 0)
        self.assertEqual(state["threat_level"], 45)
        self.assertEqual(state["sample_count"], 4)

    def test_health_counts_websocket_clients(self):
        with TestClient(self.app) as client:
            with client.websocket_connect("/ws") as websocket:
                websocket.receive_json()
                websocket.receive_json()
                connected = client.get("/api/health/").json()
            client.get("/")
            disconnected = client.get("/api/health/").json()

        self.assertEqual(connected["websocket_clients"], 1)
        self.assertEqual(disconnected["websocket_clients"], 0)


class TestForwarder(unittest.IsolatedAsyncioTestCase):
    """Tests for the WebSocket message forwarder."""

    async def test_failed_send_releases_subscription(self):
        store = seeded_store([20])
        outbox = asyncio.Queue()
        subscription = store.subscribe(outbox.put_nowait)
        websocket = AsyncMock()
        websocket.send_json.side_effect = RuntimeError("socket closed")

        with self.assertLogs("threatboard", level="WARNING"):
            await asyncio.wait_for(_forward(websocket, outbox, subscription), timeout=1)

        self.assertFalse(subscription.active)
        self.assertEqual(store.subscriber_count, 0)

        # Later appends no longer queue messages for the dead client
        store.append(Sample(threat_level=30))
        self.assertTrue(outbox.empty())

    async def test_forwards_in_order(self):
        store = seeded_store([])
        outbox = asyncio.Queue()
        subscription = store.subscribe(MagicMock())
        sent = []
        websocket = AsyncMock()
        websocket.send_json.side_effect = sent.append

        outbox.put_nowait({"type": "state", "n": 1})
        outbox.put_nowait({"type": "pong"})
        task = asyncio.create_task(_forward(websocket, outbox, subscription))
        for _ in range(5):
            await asyncio.sleep(0)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        self.assertEqual([m["type"] for m in sent], ["state", "pong"])
        self.assertTrue(subscription.active)


if __name__ == '__main__':
    unittest.main()
