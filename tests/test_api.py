import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from skillzen.core.rate_limit import limiter  # noqa: E402
from skillzen.integrations.errors import ResumeVendorError, UpstreamServiceError  # noqa: E402
from skillzen.main import app  # noqa: E402
from skillzen.quota import MemoryKeyValueStore, QuotaManager  # noqa: E402
from skillzen.services import resume_service  # noqa: E402
from skillzen.services.gemini_service import GeminiServiceError  # noqa: E402
from skillzen.services.quota_service import get_quota_manager  # noqa: E402


class ApiTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)
        # Settings are read once per process, so switch the shared limiter off directly.
        cls._limiter_enabled = limiter.enabled
        limiter.enabled = False

    @classmethod
    def tearDownClass(cls):
        limiter.enabled = cls._limiter_enabled

    def setUp(self):
        self.manager = QuotaManager(MemoryKeyValueStore(), ["key-a", "key-b"])
        self.manager.initialize_api_keys()
        app.dependency_overrides[get_quota_manager] = lambda: self.manager

    def tearDown(self):
        app.dependency_overrides.clear()


class HealthAndQuotaApiTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_quota_snapshot_shape(self):
        response = self.client.get("/v1/quota")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["activeKeyIndex"], 0)
        self.assertEqual(body["quota"]["remaining"], 50)
        self.assertTrue(body["hasBackup"])
        self.assertFalse(body["quotaExhausted"])

    def test_quota_reset(self):
        response = self.client.post("/v1/quota/reset", json={"total": 0})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["quota"]["total"], 0)
        self.assertTrue(body["quotaExhausted"])

    def test_quota_reset_rejects_negative_total(self):
        response = self.client.post("/v1/quota/reset", json={"total": -1})
        self.assertEqual(response.status_code, 422)


class GeminiApiTests(ApiTestCase):
    def test_generate_passes_request_through(self):
        result = {"response": "hi", "model": "gemini-pro", "quotaInfo": {"remaining": 49, "total": 50, "apiKeyIndex": 0}}
        with patch("skillzen.api.v1.gemini.generate_content", return_value=result) as generate:
            response = self.client.post("/v1/gemini", json={"prompt": "Hello", "modelId": "gemini-pro"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), result)
        args, kwargs = generate.call_args
        self.assertIs(args[0], self.manager)
        self.assertEqual(args[1], "Hello")
        self.assertEqual(kwargs["model_id"], "gemini-pro")
        self.assertIsNone(kwargs["audio_b64"])

    def test_service_error_maps_to_status(self):
        error = GeminiServiceError("Daily quota exceeded. Please try again tomorrow.", status_code=429, hasBackup=False)
        with patch("skillzen.api.v1.gemini.generate_content", side_effect=error):
            response = self.client.post("/v1/gemini", json={"prompt": "Hello"})

        self.assertEqual(response.status_code, 429)
        detail = response.json()["detail"]
        self.assertEqual(detail["error"], "Daily quota exceeded. Please try again tomorrow.")
        self.assertFalse(detail["hasBackup"])

    def test_empty_prompt_is_rejected(self):
        response = self.client.post("/v1/gemini", json={"prompt": ""})
        self.assertEqual(response.status_code, 422)

    def test_malformed_audio_is_rejected_before_generation(self):
        with patch("skillzen.api.v1.gemini.generate_content") as generate:
            response = self.client.post("/v1/gemini", json={"prompt": "Transcribe", "audio": "not base64!!"})

        self.assertEqual(response.status_code, 422)
        generate.assert_not_called()

    def test_base64_audio_is_forwarded(self):
        result = {"response": "hello", "model": "gemini-pro", "quotaInfo": {"remaining": 49, "total": 50, "apiKeyIndex": 0}}
        with patch("skillzen.api.v1.gemini.generate_content", return_value=result) as generate:
            response = self.client.post("/v1/gemini", json={"prompt": "Transcribe", "audio": "UklGRg=="})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(generate.call_args.kwargs["audio_b64"], "UklGRg==")


class ResumeApiTests(ApiTestCase):
    vendor_payload = {
        "contact_info": {"name": "Jane Roe", "email": "jane@example.com", "phone": "+1 555"},
        "summary": "Backend engineer",
        "experience": [{"company": "Acme", "title": "Engineer", "description": "Built Python APIs"}],
        "skills": ["Python"],
    }

    def _with_keys(self, apyhub="apyhub-test-key", apilayer="apilayer-test-key"):
        return patch.object(
            resume_service,
            "settings",
            replace(resume_service.settings, apyhub_api_key=apyhub, apilayer_api_key=apilayer),
        )

    def _upload(self, content=b"%PDF-1.4 resume", content_type="application/pdf", params=None):
        return self.client.post(
            "/v1/resume/parse",
            files={"file": ("resume.pdf", content, content_type)},
            params=params or {},
        )

    def test_normalize_endpoint(self):
        response = self.client.post(
            "/v1/resume/normalize",
            json={"payload": self.vendor_payload, "source": "manual", "include_raw": True},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["personalInfo"]["name"], "Jane Roe")
        self.assertEqual(body["personalInfo"]["linkedin"], "Not provided")
        self.assertEqual(body["experience"][0]["position"], "Engineer")
        self.assertIn("Python", body["skills"])
        self.assertEqual(body["source"], "manual")
        self.assertEqual(body["rawData"], self.vendor_payload)
        self.assertIsInstance(body["atsScore"], int)

    def test_parse_with_primary_vendor(self):
        with self._with_keys(), patch.object(
            resume_service, "parse_with_apyhub", return_value=self.vendor_payload
        ) as apyhub, patch.object(resume_service, "parse_with_apilayer") as apilayer:
            response = self._upload()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source"], "APYHub")
        self.assertEqual(body["personalInfo"]["email"], "jane@example.com")
        self.assertNotIn("rawData", body)
        apyhub.assert_called_once()
        apilayer.assert_not_called()

    def test_parse_falls_back_to_secondary_vendor(self):
        with self._with_keys(), patch.object(
            resume_service, "parse_with_apyhub", side_effect=ResumeVendorError("down", status_code=500)
        ), patch.object(resume_service, "parse_with_apilayer", return_value=self.vendor_payload):
            response = self._upload(params={"include_raw": "true"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source"], "APILayer")
        self.assertEqual(body["rawData"]["summary"], "Backend engineer")

    def test_parse_reports_unavailable_when_both_vendors_fail(self):
        failure = ResumeVendorError("down", status_code=500)
        with self._with_keys(), patch.object(
            resume_service, "parse_with_apyhub", side_effect=failure
        ), patch.object(resume_service, "parse_with_apilayer", side_effect=failure):
            response = self._upload()

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"]["error"], "Resume parsing failed")

    def test_placeholder_keys_skip_vendors(self):
        with self._with_keys(apyhub="short", apilayer=None), patch.object(
            resume_service, "parse_with_apyhub"
        ) as apyhub:
            response = self._upload()

        self.assertEqual(response.status_code, 503)
        apyhub.assert_not_called()

    def test_parse_rejects_unsupported_type(self):
        response = self._upload(content=b"GIF89a", content_type="image/gif")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid file type", response.json()["detail"])

    def test_parse_rejects_oversized_file(self):
        response = self._upload(content=b"x" * (resume_service.MAX_RESUME_BYTES + 1))
        self.assertEqual(response.status_code, 400)
        self.assertIn("File too large", response.json()["detail"])

    def test_upload_read_stops_past_the_size_limit(self):
        limit = resume_service.MAX_RESUME_BYTES
        with patch(
            "skillzen.api.v1.resume.parse_resume_file",
            side_effect=resume_service.ResumeInputError("File too large."),
        ) as parse:
            response = self._upload(content=b"x" * (limit + 4096))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(parse.call_args.args[1]), limit + 1)


class ToolsApiTests(ApiTestCase):
    def test_languagetool_proxy(self):
        result = {"matches": [{"message": "Possible typo"}], "language": {"code": "en-US"}}
        with patch("skillzen.integrations.languagetool.check_text", return_value=result) as check:
            response = self.client.post("/v1/languagetool", json={"text": "Thiss is wrong"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), result)
        check.assert_called_once_with("Thiss is wrong", None)

    def test_languagetool_upstream_error(self):
        error = UpstreamServiceError("LanguageTool request failed", status_code=503, details="busy")
        with patch("skillzen.integrations.languagetool.check_text", side_effect=error):
            response = self.client.post("/v1/languagetool", json={"text": "Hello"})

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], {"error": "LanguageTool request failed", "details": "busy"})

    def test_compile_runs_submission(self):
        result = {"stdout": "3\n", "status": {"id": 3, "description": "Accepted"}}
        with patch("skillzen.integrations.judge0.run_submission", return_value=result) as run:
            response = self.client.post(
                "/v1/compile",
                json={"code": "print(1 + 2)", "language": "python", "expectedOutput": "3"},
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), result)
        run.assert_called_once_with("print(1 + 2)", "python", stdin="", expected_output="3")

    def test_compile_rejects_unknown_language(self):
        with patch("skillzen.integrations.judge0.run_submission") as run:
            response = self.client.post("/v1/compile", json={"code": "x", "language": "cobol"})

        self.assertEqual(response.status_code, 400)
        run.assert_not_called()

    def test_api_diagnostics(self):
        results = {"apyhub": {"status": "no_key", "error": "API key not configured"}}
        with patch("skillzen.api.v1.tools.probe_vendors", return_value=results):
            response = self.client.get("/v1/test-apis")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["results"], results)
        self.assertIn("timestamp", body)


if __name__ == "__main__":
    unittest.main()
