from rest_framework import serializers


class LineItemSerializer(serializers.Serializer):
    productId = serializers.CharField(source="product_id")
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField()
    image = serializers.CharField(allow_null=True, required=False)


class CartReadSerializer(serializers.Serializer):
    ownerKey = serializers.CharField(source="owner_key")
    items = LineItemSerializer(many=True)
    totalPrice = serializers.DecimalField(
        source="total_price", max_digits=12, decimal_places=2
    )


class AddItemSerializer(serializers.Serializer):
    productId = serializers.CharField(max_length=64)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)


class UpdateQuantitySerializer(serializers.Serializer):
    # Zero or negative removes the line
    quantity = serializers.IntegerField()


class RemoveItemsSerializer(serializers.Serializer):
    productIds = serializers.ListField(
        child=serializers.CharField(max_length=64), allow_empty=True
    )
