"""
API tests for the REST surface: auth, form CRUD and publishing, the public
form endpoints, AI operations, analytics and conversations.

AI operations run without a provider so every call takes the fallback path.
"""
from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from builder.models import FormSubmission
from formcraft_app.services.ai_service import INSIGHTS_UNAVAILABLE, AIService
from formcraft_app.services.session_store import SessionStore

User = get_user_model()

PASSWORD = "tr1cky-horse-battery"

EVENT_FORM = {
    "id": "draft",
    "title": "Event signup",
    "description": "Save your seat",
    "fields": [
        {"id": "name", "type": "text", "label": "Name", "required": True},
        {"id": "email", "type": "email", "label": "Email", "required": True},
        {"id": "score", "type": "rating", "label": "Excitement", "validation": {"max": 5}},
    ],
}


class OfflineAPITestCase(APITestCase):
    def setUp(self):
        self.session_store = SessionStore()
        patchers = [
            mock.patch("formcraft_app.views.form_views.get_ai_service", return_value=AIService(None)),
            mock.patch("formcraft_app.views.auth_views.get_session_store", return_value=self.session_store),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

        self.user = User.objects.create_user(email="owner@example.com", username="owner@example.com", password=PASSWORD)
        self.client.force_authenticate(self.user)


class AuthViewTests(OfflineAPITestCase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(None)

    def test_signup_and_login(self):
        response = self.client.post(
            reverse("auth-signup"),
            {"email": "New@Example.com", "password": PASSWORD, "password_confirm": PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["user"]["email"], "new@example.com")
        self.assertIn("access", response.data["tokens"])

        response = self.client.post(
            reverse("auth-login"), {"email": "new@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        access = response.data["tokens"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        response = self.client.get(reverse("auth-me"))
        self.assertEqual(response.data["user"]["email"], "new@example.com")

    def test_signup_weak_password(self):
        response = self.client.post(
            reverse("auth-signup"), {"email": "new@example.com", "password": "password"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "weak_password")

    def test_lockout_returns_429(self):
        for _ in range(5):
            response = self.client.post(
                reverse("auth-login"), {"email": "owner@example.com", "password": "nope-nope"}, format="json"
            )
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client.post(
            reverse("auth-login"), {"email": "owner@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertIn("15 minutes", response.data["error"])

    def test_refresh_and_logout(self):
        _, tokens = self.session_store.sign_in("owner@example.com", PASSWORD)

        response = self.client.post(reverse("auth-refresh"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rotated = response.data["refresh"]

        self.client.force_authenticate(self.user)
        response = self.client.post(reverse("auth-logout"), {"refresh": rotated}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(reverse("auth-refresh"), {"refresh": rotated}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_anonymous_cannot_generate(self):
        response = self.client.post(reverse("form-generate"), {"prompt": "A survey"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class FormLifecycleTests(OfflineAPITestCase):
    def _save(self, form=EVENT_FORM):
        response = self.client.post(reverse("form-list"), {"form": form}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data["form"]["id"]

    def _submit(self, form_id, body):
        return self.client.post(reverse("public-form-submit", args=[form_id]), body, format="json")

    def test_save_list_get(self):
        form_id = self._save()

        response = self.client.get(reverse("form-list"))
        self.assertEqual([row["id"] for row in response.data["forms"]], [form_id])
        self.assertEqual(response.data["forms"][0]["form"]["id"], form_id)

        response = self.client.get(reverse("form-detail", args=[form_id]))
        self.assertEqual(response.data["form"]["title"], "Event signup")

    def test_invalid_form_document(self):
        response = self.client.post(
            reverse("form-list"),
            {"form": {"id": "x", "title": "Bad", "fields": [{"id": "a", "type": "select", "label": "Pick"}]}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_publish_controls_public_access(self):
        form_id = self._save()
        public_url = reverse("public-form", args=[form_id])

        self.assertEqual(self.client.get(public_url).status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(reverse("form-publish", args=[form_id]))
        self.assertIn("publishedAt", response.data["form"])
        response = self.client.get(public_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["form"]["id"], form_id)

        response = self.client.post(reverse("form-unpublish", args=[form_id]))
        self.assertNotIn("publishedAt", response.data["form"])
        self.assertEqual(self.client.get(public_url).status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._submit(form_id, {"data": {"name": "Ana"}}).status_code, status.HTTP_404_NOT_FOUND)

    def test_public_submission_is_validated(self):
        form_id = self._save()
        self.client.post(reverse("form-publish", args=[form_id]))

        response = self._submit(form_id, {"data": {"name": "", "email": "not-an-email", "score": 9}})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(set(response.data["errors"]), {"name", "email", "score"})

        response = self._submit(form_id, {"data": {"name": {"first": "Ana"}}})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(FormSubmission.objects.exists())

        response = self._submit(
            form_id, {"data": {"name": "Ana", "email": "ana@example.com", "score": 4}, "completionTime": 42}
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(reverse("form-submissions", args=[form_id]))
        self.assertEqual(len(response.data["submissions"]), 1)
        self.assertEqual(response.data["submissions"][0]["completion_time"], 42)

    def test_invalid_pattern_is_rejected_on_save(self):
        broken = {
            **EVENT_FORM,
            "fields": [{"id": "code", "type": "text", "label": "Code", "validation": {"pattern": "("}}],
        }
        response = self.client.post(reverse("form-list"), {"form": broken}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        form_id = self._save()
        response = self.client.put(reverse("form-detail", args=[form_id]), {"form": broken}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(reverse("form-detail", args=[form_id]))
        self.assertEqual(response.data["form"]["fields"][0]["id"], "name")

    def test_update_and_delete(self):
        form_id = self._save()

        response = self.client.put(
            reverse("form-detail", args=[form_id]), {"form": {**EVENT_FORM, "title": "Renamed"}}, format="json"
        )
        self.assertEqual(response.data["form"]["title"], "Renamed")
        self.assertEqual(response.data["form"]["id"], form_id)

        response = self.client.delete(reverse("form-detail", args=[form_id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.get(reverse("form-detail", args=[form_id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_other_users_form_is_hidden(self):
        form_id = self._save()
        other = User.objects.create_user(email="other@example.com", username="other@example.com", password=PASSWORD)
        self.client.force_authenticate(other)

        self.assertEqual(self.client.get(reverse("form-detail", args=[form_id])).status_code, 404)
        self.assertEqual(self.client.post(reverse("form-publish", args=[form_id])).status_code, 404)
        self.assertEqual(self.client.get(reverse("form-analytics", args=[form_id])).status_code, 404)

    def test_analytics(self):
        form_id = self._save()
        self.client.post(reverse("form-publish", args=[form_id]))
        self._submit(form_id, {"data": {"name": "Ana", "email": "ana@example.com"}, "completionTime": 30})

        response = self.client.get(reverse("form-analytics", args=[form_id]))
        self.assertFalse(response.data["cached"])
        self.assertEqual(response.data["analytics"]["totalSubmissions"], 1)
        self.assertEqual(response.data["analytics"]["averageTimeToComplete"], 30)

        response = self.client.get(reverse("form-analytics", args=[form_id]))
        self.assertTrue(response.data["cached"])

        response = self.client.get(reverse("form-analytics", args=[form_id]), {"refresh": "true"})
        self.assertFalse(response.data["cached"])

        response = self.client.post(
            reverse("form-analytics-ask", args=[form_id]), {"question": "Who is coming?"}, format="json"
        )
        self.assertEqual(response.data["answer"], INSIGHTS_UNAVAILABLE)

        response = self.client.get(reverse("analytics-overview"))
        self.assertEqual(response.data["total_forms"], 1)
        self.assertEqual(response.data["published_forms"], 1)
        self.assertEqual(response.data["total_submissions"], 1)


class AIFormViewTests(OfflineAPITestCase):
    def test_generate_falls_back_to_samples(self):
        response = self.client.post(reverse("form-generate"), {"prompt": "A bakery survey"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["ai_enabled"])
        self.assertEqual(len(response.data["forms"]), 2)

    def test_generate_requires_prompt(self):
        response = self.client.post(reverse("form-generate"), {"prompt": ""}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refine_fallback_appends_field(self):
        response = self.client.post(
            reverse("form-refine"), {"form": EVENT_FORM, "instruction": "Ask for a phone number"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        fields = response.data["form"]["fields"]
        self.assertEqual(len(fields), 4)
        self.assertIn("Ask for a phone number", fields[-1]["label"])

    def test_translate_fallback_relabels_language(self):
        response = self.client.post(
            reverse("form-translate"), {"form": EVENT_FORM, "target_language": "Spanish"}, format="json"
        )

        self.assertEqual(response.data["form"]["language"], "Spanish")
        self.assertEqual(response.data["form"]["title"], "Event signup")


class ConversationViewTests(OfflineAPITestCase):
    def test_message_creates_drafts(self):
        response = self.client.post(reverse("conversation-list"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        conversation_id = response.data["conversation"]["id"]

        response = self.client.post(
            reverse("conversation-messages", args=[conversation_id]),
            {"content": "A signup form for a chess club"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data["forms"]), 2)
        self.assertEqual(
            response.data["assistant_message"]["metadata"]["form_ids"],
            [form["id"] for form in response.data["forms"]],
        )

        response = self.client.get(reverse("conversation-detail", args=[conversation_id]))
        self.assertEqual(response.data["conversation"]["title"], "A signup form for a chess club")
        self.assertEqual([m["role"] for m in response.data["messages"]], ["user", "assistant"])

        response = self.client.get(reverse("form-list"))
        self.assertEqual(len(response.data["forms"]), 2)

    def test_rename_and_missing(self):
        response = self.client.post(reverse("conversation-list"), {"title": "Ideas"}, format="json")
        conversation_id = response.data["conversation"]["id"]

        response = self.client.patch(
            reverse("conversation-detail", args=[conversation_id]), {"title": "Club forms"}, format="json"
        )
        self.assertEqual(response.data["conversation"]["title"], "Club forms")

        other = User.objects.create_user(email="other@example.com", username="other@example.com", password=PASSWORD)
        self.client.force_authenticate(other)
        response = self.client.get(reverse("conversation-detail", args=[conversation_id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
