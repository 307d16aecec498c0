"""
Tests for pydantic request/response models.

Tests: camelCase aliasing, calendar-date coercion, null flag handling,
and request validation bounds.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from domain.enums import OrderPriority, OrderStatus
from models import (
    BulkReassignRequest, NoteCreateRequest, OrderCreateRequest, OrderSnapshot, OrderUpdateRequest, TokenResponse,
)


class TestOrderSnapshot:

    @pytest.mark.unit
    def test_accepts_camel_case(self):
        snap = OrderSnapshot.model_validate({
            "id": 7,
            "status": "waiting_sizes",
            "sizesValidated": True,
            "invoiceUrl": None,
            "estDelivery": "2024-06-15",
            "createdAt": "2024-06-01T10:00:00",
        })
        assert snap.sizes_validated is True
        assert snap.est_delivery == date(2024, 6, 15)

    @pytest.mark.unit
    def test_null_flags_become_false(self):
        snap = OrderSnapshot(id=1, status="new", design_approved=None, sizes_validated=None,
                             deposit_received=None, created_at=datetime(2024, 1, 1))
        assert (snap.design_approved, snap.sizes_validated, snap.deposit_received) == (False, False, False)

    @pytest.mark.unit
    def test_unknown_status_is_accepted(self):
        assert OrderSnapshot(id=1, status="on_hold", created_at=datetime(2024, 1, 1)).status == "on_hold"

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [
        ("2024-06-15T18:30:00Z", date(2024, 6, 15)),
        ("2024-06-15T00:00:00", date(2024, 6, 15)),
        (datetime(2024, 6, 15, 23, 59), date(2024, 6, 15)),
        ("", None),
    ])
    def test_est_delivery_truncated_to_date(self, value, expected):
        snap = OrderSnapshot(id=1, status="new", est_delivery=value, created_at=datetime(2024, 1, 1))
        assert snap.est_delivery == expected


class TestOrderRequests:

    @pytest.mark.unit
    def test_create_defaults(self):
        req = OrderCreateRequest.model_validate({"orderName": "Singlets"})
        assert req.status == OrderStatus.NEW
        assert req.priority == OrderPriority.NORMAL

    @pytest.mark.unit
    def test_create_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            OrderCreateRequest.model_validate({"orderName": "Singlets", "status": "on_hold"})

    @pytest.mark.unit
    def test_create_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            OrderCreateRequest(order_name="")

    @pytest.mark.unit
    def test_update_only_dumps_sent_fields(self):
        req = OrderUpdateRequest.model_validate({"invoiceUrl": "https://invoices.example/1", "estDelivery": None})
        assert req.model_dump(exclude_unset=True) == {"invoice_url": "https://invoices.example/1", "est_delivery": None}

    @pytest.mark.unit
    @pytest.mark.parametrize("field", ["orderName", "status", "priority", "designApproved", "sizesValidated", "depositReceived"])
    def test_update_rejects_null_for_required_columns(self, field):
        with pytest.raises(ValidationError, match="cannot be null"):
            OrderUpdateRequest.model_validate({field: None})

    @pytest.mark.unit
    def test_bulk_reassign_needs_order_ids(self):
        with pytest.raises(ValidationError):
            BulkReassignRequest.model_validate({"orderIds": [], "salespersonId": "user-sales-1"})
        req = BulkReassignRequest.model_validate({"orderIds": [1, 2]})
        assert req.salesperson_id is None

    @pytest.mark.unit
    def test_note_is_trimmed_and_not_blank(self):
        assert NoteCreateRequest(note="  ship Friday ").note == "ship Friday"
        with pytest.raises(ValidationError):
            NoteCreateRequest(note=" \n ")


class TestResponses:

    @pytest.mark.unit
    def test_token_response_dumps_camel_case(self):
        data = TokenResponse(user_id="u", role="ops", access_token="t", expires_in_seconds=3600).model_dump(by_alias=True)
        assert data == {
            "userId": "u",
            "role": "ops",
            "accessToken": "t",
            "tokenType": "Bearer",
            "expiresInSeconds": 3600,
        }
