from rest_framework import serializers

from .models import Order


class OrderItemSerializer(serializers.Serializer):
    productId = serializers.CharField(source="product_id")
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    image = serializers.CharField(allow_null=True, required=False)


class OrderReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    accountId = serializers.IntegerField(source="account_id")
    ownerKey = serializers.CharField(source="owner_key")
    status = serializers.CharField()
    totalPrice = serializers.DecimalField(
        source="total_price", max_digits=12, decimal_places=2
    )
    createdAt = serializers.DateTimeField(source="created_at", allow_null=True)
    items = OrderItemSerializer(many=True)


class OrderEnvelopeSerializer(serializers.Serializer):
    order = OrderReadSerializer()


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
