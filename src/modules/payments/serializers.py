"""Payment DRF serializers.

``PaymentNotificationSerializer`` accepts the provider's notification
body::

    {"type": "notification", "event": "payment.succeeded",
     "object": {"id": "...", "status": "succeeded", "paid": true,
                "amount": {"value": "10.00", "currency": "RUB"},
                "metadata": {"order_id": "..."}}}
"""

from __future__ import annotations

from rest_framework import serializers

from modules.payments.constants import PaymentStatus
from modules.payments.models import Payment

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreatePaymentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class AmountSerializer(serializers.Serializer):
    value = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField(max_length=3)


class NotificationObjectSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=100)
    status = serializers.ChoiceField(choices=PaymentStatus.choices)
    paid = serializers.BooleanField(required=False, default=False)
    amount = AmountSerializer(required=False)
    description = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=255
    )
    metadata = serializers.DictField(required=False, default=dict)
    test = serializers.BooleanField(required=False, default=False)


class PaymentNotificationSerializer(serializers.Serializer):
    type = serializers.CharField(required=False, default="notification")
    event = serializers.CharField(required=False, default="", allow_blank=True)
    object = NotificationObjectSerializer()

    def to_callback_data(self) -> dict:
        obj = self.validated_data["object"]
        amount = obj.get("amount") or {}
        return {
            "provider_payment_id": obj["id"],
            "status": obj["status"],
            "paid": obj["paid"],
            "amount": amount.get("value"),
            "currency": amount.get("currency"),
            "description": obj["description"],
            "metadata": obj["metadata"],
            "test": obj["test"],
            "event": self.validated_data["event"],
        }


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "provider_payment_id",
            "order_id",
            "amount",
            "currency",
            "status",
            "paid",
            "description",
            "confirmation_url",
            "test",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
