from __future__ import annotations

import os
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from journal_insights.db import JournalStore, dumps_payload
from journal_insights.main import create_app
from journal_insights.settings import SESSION_COOKIE


class EndpointTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JournalStore(os.path.join(self._tmp.name, "test_endpoints.db"))
        self.app = create_app(self.store)

        self.user_id = self.store.create_user(email="me@example.com", name="Me")
        self.other_id = self.store.create_user(email="other@example.com", name="Other")
        self.store.create_session(self.user_id, "test-session")

        self.client = TestClient(self.app, raise_server_exceptions=False)
        self.client.cookies.set(SESSION_COOKIE, "test-session")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _set_wheel(self, life_areas: str, priorities: str | None = None) -> None:
        self.store.upsert_wheel_of_life(self.user_id, life_areas=life_areas, priorities=priorities)

    def test_health_needs_no_session(self) -> None:
        r = TestClient(self.app).get("/api/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"ok": True})

    def test_requires_valid_session(self) -> None:
        anonymous = TestClient(self.app)
        r = anonymous.get("/api/insights")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"message": "Unauthorized"})

        anonymous.cookies.set(SESSION_COOKIE, "unknown")
        self.assertEqual(anonymous.get("/api/nudges").status_code, 401)

    def test_journal_entry_crud(self) -> None:
        r = self.client.post("/api/journal/entries", json={"content": "Met a friend for coffee"})
        self.assertEqual(r.status_code, 201)
        entry_id = r.json()["id"]

        r = self.client.get(f"/api/journal/entries/{entry_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["entry"]["content"], "Met a friend for coffee")
        self.assertEqual(r.json()["entry"]["processingType"], "full-analysis")
        self.assertIsNone(r.json()["analysis"])

        r = self.client.put(f"/api/journal/entries/{entry_id}", json={"processingStatus": "completed"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["processingStatus"], "completed")
        self.assertEqual(r.json()["content"], "Met a friend for coffee")

        listed = self.client.get("/api/journal/entries").json()
        self.assertEqual([e["id"] for e in listed], [entry_id])

        r = self.client.delete(f"/api/journal/entries/{entry_id}")
        self.assertEqual(r.json(), {"message": "Entry deleted successfully"})
        self.assertEqual(self.client.get(f"/api/journal/entries/{entry_id}").status_code, 404)

    def test_entry_owned_by_someone_else(self) -> None:
        entry_id = self.store.create_journal_entry(user_id=self.other_id, content="private")
        for method in ("get", "delete"):
            r = getattr(self.client, method)(f"/api/journal/entries/{entry_id}")
            self.assertEqual(r.status_code, 403)
            self.assertEqual(r.json(), {"message": "Unauthorized"})
        self.assertIsNotNone(self.store.get_journal_entry_by_id(entry_id))

    def test_validation_errors(self) -> None:
        self.assertEqual(self.client.post("/api/check-ins", json={"mood": "😊", "energy": 11}).status_code, 422)
        self.assertEqual(self.client.post("/api/journal/entries", json={"processingStatus": "done"}).status_code, 422)
        self.assertEqual(self.client.get("/api/journal/entries", params={"limit": 0}).status_code, 422)
        self.assertEqual(self.client.post("/api/nudges", json={"nudgeId": "n1", "action": "liked"}).status_code, 422)

    def test_validation_error_body(self) -> None:
        r = self.client.post("/api/check-ins", json={"mood": "😊", "energy": 11})
        self.assertEqual(r.status_code, 422)
        body = r.json()
        self.assertEqual(body["message"], "Invalid request")
        self.assertEqual(body["errors"][0]["loc"], ["body", "energy"])

    def test_unhandled_error_is_a_plain_500(self) -> None:
        with mock.patch.object(self.store, "get_recaps_by_user_id", side_effect=RuntimeError("disk gone")):
            with self.assertLogs("journal_insights.main", level="ERROR") as logs:
                r = self.client.get("/api/recaps")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"message": "Internal server error"})
        self.assertIn("GET /api/recaps", logs.output[0])

    def test_check_ins(self) -> None:
        r = self.client.post("/api/check-ins", json={"mood": "😊", "energy": 7, "sleepHours": 8, "sleepMinutes": 30})
        self.assertEqual(r.status_code, 201)
        [check_in] = self.client.get("/api/check-ins").json()
        self.assertEqual(check_in["mood"], "😊")
        self.assertEqual(check_in["sleepMinutes"], 30)

    def test_correlations(self) -> None:
        self.client.post("/api/journal/entries", json={"content": "Long day at work"})
        self.client.post("/api/check-ins", json={"mood": "😊", "energy": 8, "sleepHours": 8})

        r = self.client.get("/api/analytics/correlations", params={"period": "30", "type": "mood"})
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(len(body["moodCorrelations"]), 1)
        self.assertEqual(body["sleepCorrelations"], [])
        self.assertIn("insights", body)

    def test_bad_query_values(self) -> None:
        r = self.client.get("/api/analytics/correlations", params={"period": "abc"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json(), {"message": "Invalid period: abc"})
        self.assertEqual(self.client.get("/api/analytics/correlations", params={"period": "0"}).status_code, 400)
        self.assertEqual(self.client.get("/api/analytics/correlations", params={"type": "weather"}).status_code, 400)
        r = self.client.get("/api/analytics/personality-evolution", params={"granularity": "hourly"})
        self.assertEqual(r.status_code, 400)

    def test_personality_evolution(self) -> None:
        self.client.post("/api/journal/entries", json={"content": "Started a new job, feeling happy"})
        r = self.client.get("/api/analytics/personality-evolution", params={"granularity": "daily"})
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(len(body["timeline"]), 1)
        self.assertEqual(body["timeline"][0]["type"], "daily")
        self.assertEqual(body["lifeEvents"][0]["type"], "career")

    def test_recap_generation_and_listing(self) -> None:
        self.client.post("/api/journal/entries", json={"content": "Family dinner"})
        r = self.client.post("/api/recaps/generate", json={"type": "weekly", "userId": self.user_id})
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["message"], "weekly recap generated successfully")
        self.assertEqual(body["recap"]["period"], "weekly")

        [stored] = self.client.get("/api/recaps").json()
        self.assertEqual(stored["id"], body["id"])
        self.assertEqual(stored["title"], body["recap"]["title"])

    def test_recap_for_another_user_is_rejected(self) -> None:
        r = self.client.post("/api/recaps/generate", json={"type": "weekly", "userId": self.other_id})
        self.assertEqual(r.status_code, 403)
        self.assertEqual(self.store.get_recaps_by_user_id(self.user_id), [])

    def test_malformed_recap_row_is_skipped(self) -> None:
        self.store.create_recap(
            user_id=self.user_id,
            type="weekly",
            period_start="2024-06-01",
            period_end="2024-06-08",
            content="{broken",
            insights="[]",
            recommendations="[]",
        )
        r = self.client.get("/api/recaps")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), [])

    def test_recap_cards(self) -> None:
        self.client.post("/api/check-ins", json={"mood": "happy", "energy": 6})
        r = self.client.get("/api/recaps/generate-cards")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([c["id"] for c in r.json()], ["mood-card"])

    def test_insights_and_nudges(self) -> None:
        self._set_wheel("not json")
        r = self.client.get("/api/insights")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["lifeAreas"], [])

        r = self.client.get("/api/nudges")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["summary"]["totalNudges"], 0)

        r = self.client.post("/api/nudges", json={"nudgeId": "wellness-mood-1", "action": "dismissed"})
        self.assertTrue(r.json()["success"])
        self.assertIn("id", r.json()["result"])

    def test_life_area_detail(self) -> None:
        self._set_wheel(dumps_payload([{"id": "career", "currentScore": 6}]), '["health", "career"]')
        self.store.create_goal(user_id=self.user_id, title="Ship it", life_area_id="career")
        self.store.create_goal(user_id=self.user_id, title="Run", life_area_id="health")

        r = self.client.get("/api/wheel-of-life/area/career")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["name"], "Career & Work")
        self.assertEqual(body["currentScore"], 6)
        self.assertEqual(body["priority"], 2)
        self.assertEqual([g["title"] for g in body["goals"]], ["Ship it"])
        self.assertEqual(body["journalAnalysis"]["totalEntries"], 0)

        self.assertEqual(self.client.get("/api/wheel-of-life/area/health").status_code, 404)

    def test_life_area_errors(self) -> None:
        r = self.client.get("/api/wheel-of-life/area/career")
        self.assertEqual(r.json(), {"message": "Wheel of Life not found"})

        self._set_wheel('[{"name": "no id"}]')
        r = self.client.get("/api/wheel-of-life/area/career")
        self.assertEqual(r.status_code, 500)
        self.assertEqual(r.json(), {"message": "Invalid life areas data format"})

    def test_malformed_priorities_give_no_priority(self) -> None:
        self._set_wheel(dumps_payload([{"id": "career", "currentScore": 6}]), '["career", 3]')
        with self.assertLogs("journal_insights.main", level="WARNING"):
            r = self.client.get("/api/wheel-of-life/area/career")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["priority"], 0)

        self._set_wheel(dumps_payload([{"id": "career"}]), "{not json")
        self.assertEqual(self.client.get("/api/wheel-of-life/area/career").json()["priority"], 0)

    def test_life_area_update(self) -> None:
        self._set_wheel(dumps_payload([{"id": "career", "currentScore": 6, "targetScore": 9}]), '["career"]')
        r = self.client.put("/api/wheel-of-life/area/career", json={"currentScore": 8})
        self.assertEqual(r.json(), {"success": True})

        body = self.client.get("/api/wheel-of-life/area/career").json()
        self.assertEqual(body["currentScore"], 8)
        self.assertEqual(body["targetScore"], 9)
        self.assertEqual(body["priority"], 1)

        self.assertEqual(self.client.put("/api/wheel-of-life/area/health", json={"currentScore": 5}).status_code, 404)
        self.assertEqual(self.client.put("/api/wheel-of-life/area/career", json={"currentScore": 11}).status_code, 422)


if __name__ == "__main__":
    unittest.main()
