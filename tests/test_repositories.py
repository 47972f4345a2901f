"""Tests for the entity repositories: validation, CRUD and ordering."""

import pytest

from formsapi.database import client_table, field_table, form_table, response_table
from formsapi.errors import ConflictFailure, ConsistencyFailure, ValidationFailure
from formsapi.models.client import ClientIn, ClientUpdateIn
from formsapi.models.field import FieldIn, FieldUpdateIn
from formsapi.models.form import FormIn, FormUpdateIn
from formsapi.models.response import ResponseIn, ResponseUpdateIn
from formsapi.repositories import base

FROZEN_NOW = "2030-01-01T00:00:00+00:00"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _create_form(forms, name="Feedback", status="draft", **kwargs):
    return await forms.create(FormIn(name=name, status=status, **kwargs))


async def _create_field(fields, form_id, question_text="Rate us", answer_type="text", **kwargs):
    return await fields.create(
        FieldIn(form_id=form_id, question_text=question_text, answer_type=answer_type, **kwargs)
    )


async def _create_client(clients, form_id=1, email="jo@x.com", date_responded="2024-01-01", **kwargs):
    return await clients.create(
        ClientIn(name="Jo", email=email, form_id=form_id, date_responded=date_responded, **kwargs)
    )


async def _row_count(store, table):
    return len(await store.fetch_all(table.select()))


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


class TestFormRepository:
    @pytest.mark.asyncio
    async def test_create_trims_and_round_trips(self, forms):
        created = await forms.create(
            FormIn(name="  Feedback  ", description="  About us ", status=" Published ")
        )

        assert created.form_id > 0
        assert created.name == "Feedback"
        assert created.description == "About us"
        assert created.status == "Published"
        assert created.date_published is None
        assert created.date_closed is None
        assert created.date_created == created.date_updated

        fetched = await forms.get_by_id(created.form_id)
        assert fetched == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"status": "draft"}, "Form name is required"),
            ({"name": "   ", "status": "draft"}, "Form name is required"),
            ({"name": "Feedback"}, "Form status is required"),
            ({"name": "Feedback", "status": "\t"}, "Form status is required"),
        ],
    )
    async def test_create_rejects_blank_required_fields(self, store, forms, payload, message):
        with pytest.raises(ValidationFailure, match=message):
            await forms.create(FormIn(**payload))
        assert await _row_count(store, form_table) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [0, -3, True, "1", None, 1.5])
    async def test_ids_must_be_positive_integers(self, forms, bad_id):
        with pytest.raises(ValidationFailure, match="Form id must be a positive integer"):
            await forms.get_by_id(bad_id)
        with pytest.raises(ValidationFailure):
            await forms.update(bad_id, FormUpdateIn(name="x"))
        with pytest.raises(ValidationFailure):
            await forms.delete(bad_id)

    @pytest.mark.asyncio
    async def test_get_missing_form_returns_none(self, forms):
        assert await forms.get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, forms):
        first = await _create_form(forms, "First")
        second = await _create_form(forms, "Second")
        third = await _create_form(forms, "Third")

        listed = await forms.list_all()
        assert [f.form_id for f in listed] == [third.form_id, second.form_id, first.form_id]

    @pytest.mark.asyncio
    async def test_update_changes_only_sent_fields(self, forms, monkeypatch):
        created = await _create_form(forms, description="Keep me")
        monkeypatch.setattr(base, "utc_now", lambda: FROZEN_NOW)

        updated = await forms.update(created.form_id, FormUpdateIn(status="  published "))

        assert updated.status == "published"
        assert updated.name == "Feedback"
        assert updated.description == "Keep me"
        assert updated.date_created == created.date_created
        assert updated.date_updated == FROZEN_NOW

    @pytest.mark.asyncio
    async def test_update_can_clear_optional_fields(self, forms):
        created = await _create_form(forms, description="Old", date_published="2024-01-01")

        updated = await forms.update(
            created.form_id, FormUpdateIn(description=None, date_published=None)
        )
        assert updated.description is None
        assert updated.date_published is None

    @pytest.mark.asyncio
    async def test_update_with_nothing_to_change_fails(self, forms):
        created = await _create_form(forms)
        with pytest.raises(ValidationFailure, match="No form fields to update"):
            await forms.update(created.form_id, FormUpdateIn())

    @pytest.mark.asyncio
    async def test_update_rejects_blank_name(self, forms):
        created = await _create_form(forms)
        with pytest.raises(
            ValidationFailure, match="If provided, form name must be a non-empty string"
        ):
            await forms.update(created.form_id, FormUpdateIn(name="   "))
        assert (await forms.get_by_id(created.form_id)).name == "Feedback"

    @pytest.mark.asyncio
    async def test_update_missing_form_returns_none(self, forms):
        assert await forms.update(404, FormUpdateIn(name="Nobody")) is None

    @pytest.mark.asyncio
    async def test_delete(self, forms):
        created = await _create_form(forms)
        await forms.delete(created.form_id)
        assert await forms.get_by_id(created.form_id) is None
        # unknown ids are not an error
        await forms.delete(created.form_id)

    @pytest.mark.asyncio
    async def test_delete_leaves_fields_in_place(self, forms, fields):
        form = await _create_form(forms)
        field = await _create_field(fields, form.form_id)

        await forms.delete(form.form_id)
        assert await fields.get_by_id(field.field_id) == field

    @pytest.mark.asyncio
    async def test_missing_row_after_insert_is_a_consistency_failure(self, forms, monkeypatch):
        async def _vanished(form_id):
            return None

        monkeypatch.setattr(forms, "get_by_id", _vanished)
        with pytest.raises(ConsistencyFailure, match="Failed to load form after creation") as excinfo:
            await _create_form(forms)
        assert isinstance(excinfo.value, ValidationFailure)


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


class TestFieldRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, forms, fields):
        form = await _create_form(forms)
        created = await _create_field(
            fields,
            form.form_id,
            question_text="  Pick one ",
            answer_type=" radio ",
            options_json='["Yes", "No"]',
        )

        assert created.form_id == form.form_id
        assert created.question_text == "Pick one"
        assert created.answer_type == "radio"
        assert created.options_json == '["Yes", "No"]'
        assert await fields.get_by_id(created.field_id) == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"form_id": 0, "question_text": "Q", "answer_type": "text"}, "form_id must be a positive integer"),
            ({"question_text": "Q", "answer_type": "text"}, "form_id must be a positive integer"),
            ({"form_id": 1, "question_text": " ", "answer_type": "text"}, "question_text is required"),
            ({"form_id": 1, "question_text": "Q", "answer_type": ""}, "answer_type is required"),
            (
                {"form_id": 1, "question_text": "Q", "answer_type": "radio", "options_json": "[Yes"},
                "options_json must be valid JSON",
            ),
        ],
    )
    async def test_create_validation(self, store, fields, payload, message):
        with pytest.raises(ValidationFailure, match=message):
            await fields.create(FieldIn(**payload))
        assert await _row_count(store, field_table) == 0

    @pytest.mark.asyncio
    async def test_list_by_form_in_creation_order(self, forms, fields):
        form = await _create_form(forms)
        other = await _create_form(forms, "Other")
        q1 = await _create_field(fields, form.form_id, "Q1")
        await _create_field(fields, other.form_id, "Elsewhere")
        q2 = await _create_field(fields, form.form_id, "Q2")

        listed = await fields.list_by_form_id(form.form_id)
        assert [f.field_id for f in listed] == [q1.field_id, q2.field_id]

    @pytest.mark.asyncio
    async def test_list_by_form_rejects_bad_id(self, fields):
        with pytest.raises(ValidationFailure, match="form_id must be a positive integer"):
            await fields.list_by_form_id(-1)

    @pytest.mark.asyncio
    async def test_update_stamps_date_updated(self, forms, fields, monkeypatch):
        form = await _create_form(forms)
        created = await _create_field(fields, form.form_id, options_json='["A"]')
        monkeypatch.setattr(base, "utc_now", lambda: FROZEN_NOW)

        updated = await fields.update(
            created.field_id, FieldUpdateIn(question_text="New question", options_json=None)
        )
        assert updated.question_text == "New question"
        assert updated.answer_type == "text"
        assert updated.options_json is None
        assert updated.date_updated == FROZEN_NOW

    @pytest.mark.asyncio
    async def test_update_with_nothing_to_change_fails(self, forms, fields):
        form = await _create_form(forms)
        created = await _create_field(fields, form.form_id)
        with pytest.raises(ValidationFailure, match="No field properties to update"):
            await fields.update(created.field_id, FieldUpdateIn())

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_json(self, forms, fields):
        form = await _create_form(forms)
        created = await _create_field(fields, form.form_id)
        with pytest.raises(ValidationFailure, match="options_json must be valid JSON"):
            await fields.update(created.field_id, FieldUpdateIn(options_json="{oops"))


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


class TestClientRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, clients):
        created = await clients.create(
            ClientIn(name=" Jo ", email=" jo@x.com ", form_id=3, date_responded="2024-05-01")
        )
        assert created.name == "Jo"
        assert created.email == "jo@x.com"
        assert created.form_id == 3
        assert await clients.get_by_id(created.client_id) == created

    @pytest.mark.asyncio
    async def test_form_id_is_optional(self, clients):
        created = await clients.create(
            ClientIn(name="Jo", email="jo@x.com", date_responded="2024-05-01")
        )
        assert created.form_id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": " "}, "Client name is required"),
            ({"email": ""}, "Client email is required"),
            ({"email": "not-an-email"}, "email must be a valid email address"),
            ({"email": "jo@localhost"}, "email must be a valid email address"),
            ({"form_id": 0}, "If provided, form_id must be a positive integer"),
            ({"date_responded": "  "}, "date_responded is required"),
        ],
    )
    async def test_create_validation(self, store, clients, overrides, message):
        payload = {"name": "Jo", "email": "jo@x.com", "form_id": 1, "date_responded": "2024-01-01"}
        payload.update(overrides)
        with pytest.raises(ValidationFailure, match=message):
            await clients.create(ClientIn(**payload))
        assert await _row_count(store, client_table) == 0

    @pytest.mark.asyncio
    async def test_duplicate_email_for_same_form_conflicts(self, clients):
        await _create_client(clients, form_id=1)
        with pytest.raises(ConflictFailure):
            await _create_client(clients, form_id=1)
        assert len(await clients.list_by_form_id(1)) == 1

    @pytest.mark.asyncio
    async def test_list_by_form_most_recent_first(self, clients):
        jan = await _create_client(clients, email="a@x.com", date_responded="2024-01-01T00:00:00Z")
        mar = await _create_client(clients, email="b@x.com", date_responded="2024-03-01T00:00:00Z")
        feb = await _create_client(clients, email="c@x.com", date_responded="2024-02-01T00:00:00Z")
        await _create_client(clients, form_id=2, email="d@x.com")

        listed = await clients.list_by_form_id(1)
        assert [c.client_id for c in listed] == [mar.client_id, feb.client_id, jan.client_id]

    @pytest.mark.asyncio
    async def test_lookup_by_email_and_form_is_exact(self, clients):
        created = await _create_client(clients, form_id=1, email="jo@x.com")

        assert await clients.get_by_email_and_form_id(" jo@x.com ", 1) == created
        assert await clients.get_by_email_and_form_id("Jo@x.com", 1) is None
        assert await clients.get_by_email_and_form_id("jo@x.com", 2) is None

    @pytest.mark.asyncio
    async def test_lookup_validates_arguments(self, clients):
        with pytest.raises(ValidationFailure, match="email is required"):
            await clients.get_by_email_and_form_id("  ", 1)
        with pytest.raises(ValidationFailure, match="form_id must be a positive integer"):
            await clients.get_by_email_and_form_id("jo@x.com", 0)

    @pytest.mark.asyncio
    async def test_update(self, clients):
        created = await _create_client(clients)
        updated = await clients.update(
            created.client_id, ClientUpdateIn(email="new@x.com", form_id=None)
        )
        assert updated.email == "new@x.com"
        assert updated.form_id is None
        assert updated.name == "Jo"

    @pytest.mark.asyncio
    async def test_update_validation(self, clients):
        created = await _create_client(clients)
        with pytest.raises(ValidationFailure, match="No client fields to update"):
            await clients.update(created.client_id, ClientUpdateIn())
        with pytest.raises(ValidationFailure, match="email must be a valid email address"):
            await clients.update(created.client_id, ClientUpdateIn(email="nope"))
        with pytest.raises(
            ValidationFailure, match="If provided, email must be a non-empty string"
        ):
            await clients.update(created.client_id, ClientUpdateIn(email=None))

    @pytest.mark.asyncio
    async def test_update_into_duplicate_conflicts(self, clients):
        await _create_client(clients, email="a@x.com")
        other = await _create_client(clients, email="b@x.com")
        with pytest.raises(ConflictFailure):
            await clients.update(other.client_id, ClientUpdateIn(email="a@x.com"))


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TestResponseRepository:
    @pytest.mark.asyncio
    async def test_create_trims_text(self, responses):
        created = await responses.create(ResponseIn(client_id=1, field_id=2, response_text="  Great "))
        assert created.response_text == "Great"
        assert await responses.get_by_id(created.response_id) == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"client_id": 0, "field_id": 1, "response_text": "x"}, "client_id must be a positive integer"),
            ({"client_id": 1, "field_id": None, "response_text": "x"}, "field_id must be a positive integer"),
            ({"client_id": 1, "field_id": 1, "response_text": "   "}, "response_text is required"),
        ],
    )
    async def test_create_validation(self, store, responses, payload, message):
        with pytest.raises(ValidationFailure, match=message):
            await responses.create(ResponseIn(**payload))
        assert await _row_count(store, response_table) == 0

    @pytest.mark.asyncio
    async def test_list_by_client_and_field(self, responses):
        a = await responses.create(ResponseIn(client_id=1, field_id=10, response_text="a"))
        b = await responses.create(ResponseIn(client_id=1, field_id=11, response_text="b"))
        c = await responses.create(ResponseIn(client_id=2, field_id=10, response_text="c"))

        by_client = await responses.list_by_client_id(1)
        assert [r.response_id for r in by_client] == [a.response_id, b.response_id]

        by_field = await responses.list_by_field_id(10)
        assert [r.response_id for r in by_field] == [a.response_id, c.response_id]

    @pytest.mark.asyncio
    async def test_update_and_delete(self, responses):
        created = await responses.create(ResponseIn(client_id=1, field_id=1, response_text="old"))

        updated = await responses.update(created.response_id, ResponseUpdateIn(response_text=" new "))
        assert updated.response_text == "new"

        with pytest.raises(ValidationFailure, match="No response fields to update"):
            await responses.update(created.response_id, ResponseUpdateIn())

        await responses.delete(created.response_id)
        assert await responses.get_by_id(created.response_id) is None
