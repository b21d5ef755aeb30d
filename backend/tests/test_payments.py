# backend/tests/test_payments.py
import pytest

from models.log import Log
from models.order import Order, OrderStatus
from models.payment import Payment, PaymentStatus
from tests.conftest import auth_headers


@pytest.fixture()
def order_id(buyer, farmer, make_product, place_order):
    [summary] = place_order(buyer, [(make_product(farmer, price=50), 2)])
    return summary["orderId"]


def _pay(client, user, order_id, amount=100, transaction_id="MPESA-QX1"):
    return client.post(
        "/api/payments",
        json={"order_id": order_id, "amount": amount, "payment_method": "mpesa", "transaction_id": transaction_id},
        headers=auth_headers(user),
    )


def test_create_payment_is_pending(client, db, buyer, order_id):
    res = _pay(client, buyer, order_id)
    assert res.status_code == 201
    assert res.json()["message"] == "Payment created successfully"

    payment = db.get(Payment, res.json()["paymentId"])
    assert payment.payment_status == PaymentStatus.PENDING
    assert payment.processed_by is None


def test_payment_for_unknown_order(client, buyer):
    res = _pay(client, buyer, 404)
    assert res.status_code == 404
    assert res.json() == {"message": "Order not found"}


def test_payment_amount_is_not_checked_against_order(client, buyer, order_id):
    assert _pay(client, buyer, order_id, amount=1).status_code == 201


def test_approve_confirms_order_exactly_once(client, db, admin, buyer, order_id):
    payment_id = _pay(client, buyer, order_id).json()["paymentId"]
    url = f"/api/payments/{payment_id}/approve"

    res = client.put(url, json={"notes": "Checked statement"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json() == {"message": "Payment approved and order confirmed"}

    again = client.put(url, headers=auth_headers(admin))
    assert again.status_code == 400
    assert again.json() == {"message": "Payment is not in pending status"}

    payment = db.get(Payment, payment_id)
    assert payment.payment_status == PaymentStatus.COMPLETED
    assert payment.processed_by == admin.id
    assert payment.notes == "Checked statement"
    assert db.get(Order, order_id).status == OrderStatus.CONFIRMED
    assert db.query(Log).filter(Log.action == "PAYMENT_APPROVE").count() == 1


def test_reject_cancels_order(client, db, admin, buyer, order_id):
    payment_id = _pay(client, buyer, order_id).json()["paymentId"]
    res = client.put(f"/api/payments/{payment_id}/reject", headers=auth_headers(admin))
    assert res.json() == {"message": "Payment rejected and order cancelled"}

    assert db.get(Payment, payment_id).payment_status == PaymentStatus.FAILED
    assert db.get(Order, order_id).status == OrderStatus.CANCELLED

    res = client.put(f"/api/payments/{payment_id}/approve", headers=auth_headers(admin))
    assert res.status_code == 400


def test_retried_payment_is_decided_after_rejection(client, db, admin, buyer, order_id):
    first = _pay(client, buyer, order_id, transaction_id="T-1").json()["paymentId"]
    second = _pay(client, buyer, order_id, transaction_id="T-2").json()["paymentId"]
    third = _pay(client, buyer, order_id, transaction_id="T-3").json()["paymentId"]
    assert client.put(f"/api/payments/{first}/reject", headers=auth_headers(admin)).status_code == 200

    res = client.put(f"/api/payments/{second}/approve", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json() == {"message": "Payment approved, order status unchanged"}

    res = client.put(f"/api/payments/{third}/reject", headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json() == {"message": "Payment rejected, order status unchanged"}

    assert db.get(Payment, second).payment_status == PaymentStatus.COMPLETED
    assert db.get(Payment, second).processed_by == admin.id
    assert db.get(Payment, third).payment_status == PaymentStatus.FAILED
    assert db.get(Order, order_id).status == OrderStatus.CANCELLED
    assert client.get("/api/payments/pending/approvals", headers=auth_headers(admin)).json() == []

    entry = db.query(Log).filter(Log.action == "PAYMENT_APPROVE").one()
    assert entry.meta["order_moved"] is False


def test_payment_on_shipped_order_is_decided(client, db, admin, agent, buyer, order_id):
    paid = _pay(client, buyer, order_id, transaction_id="S-1").json()["paymentId"]
    bounced = _pay(client, buyer, order_id, transaction_id="S-2").json()["paymentId"]
    res = client.post(
        "/api/logistics/assign-order",
        json={"order_id": order_id, "delivery_agent_id": agent.id},
        headers=auth_headers(admin),
    )
    assert res.status_code == 201

    assert client.put(f"/api/payments/{paid}/approve", headers=auth_headers(admin)).status_code == 200
    assert client.put(f"/api/payments/{bounced}/reject", headers=auth_headers(admin)).status_code == 200

    assert db.get(Payment, paid).payment_status == PaymentStatus.COMPLETED
    assert db.get(Payment, bounced).payment_status == PaymentStatus.FAILED
    assert db.get(Order, order_id).status == OrderStatus.SHIPPED


def test_payments_are_private_to_order_participants(client, make_user, admin, buyer, farmer, order_id):
    payment_id = _pay(client, buyer, order_id).json()["paymentId"]
    stranger = make_user("buyer")

    for url in (f"/api/payments/{payment_id}", f"/api/payments/order/{order_id}"):
        res = client.get(url, headers=auth_headers(stranger))
        assert res.status_code == 404
        assert res.json() == {"message": "Order not found or forbidden"}
        assert client.get(url, headers=auth_headers(farmer)).status_code == 200
        assert client.get(url, headers=auth_headers(admin)).status_code == 200


def test_only_the_ordering_buyer_submits_payment(client, db, make_user, farmer, agent, admin, order_id):
    stranger = make_user("buyer")
    res = _pay(client, stranger, order_id)
    assert res.status_code == 404
    assert res.json() == {"message": "Order not found or forbidden"}

    for outsider in (farmer, agent):
        assert _pay(client, outsider, order_id).status_code == 403

    assert db.query(Payment).count() == 0
    assert _pay(client, admin, order_id).status_code == 201


def test_only_admin_decides(client, buyer, farmer, order_id):
    payment_id = _pay(client, buyer, order_id).json()["paymentId"]
    for user in (buyer, farmer):
        assert client.put(f"/api/payments/{payment_id}/approve", headers=auth_headers(user)).status_code == 403


def test_approve_unknown_payment(client, admin):
    res = client.put("/api/payments/77/approve", headers=auth_headers(admin))
    assert res.status_code == 404
    assert res.json() == {"message": "Payment not found"}


def test_pending_queue_is_oldest_first(client, admin, buyer, order_id):
    ids = [_pay(client, buyer, order_id, transaction_id=f"T-{n}").json()["paymentId"] for n in range(3)]
    client.put(f"/api/payments/{ids[1]}/reject", headers=auth_headers(admin))

    queue = client.get("/api/payments/pending/approvals", headers=auth_headers(admin)).json()
    assert [p["id"] for p in queue] == [ids[0], ids[2]]
    assert queue[0]["buyer_name"] == "Amina Hassan"
    assert queue[0]["order_amount"] == 100


def test_payments_by_order(client, buyer, order_id):
    _pay(client, buyer, order_id, transaction_id="A")
    _pay(client, buyer, order_id, transaction_id="B")
    res = client.get(f"/api/payments/order/{order_id}", headers=auth_headers(buyer))
    assert {p["transaction_id"] for p in res.json()} == {"A", "B"}
