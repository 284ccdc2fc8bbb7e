from rest_framework import serializers


class ProductReadSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    description = serializers.CharField(allow_blank=True)
    image = serializers.CharField(allow_blank=True)
    stock = serializers.IntegerField()


class ProductWriteSerializer(serializers.Serializer):
    # 'id' is generated server-side and never accepted from clients
    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True)
    stock = serializers.IntegerField(required=False, min_value=0)
