from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.common.keys import account_key_for


class AccountTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Token pair plus the account's cart owner key."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["owner_key"] = account_key_for(user.pk)
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data["ownerKey"] = account_key_for(self.user.pk)
        data["isStaff"] = bool(self.user.is_staff or self.user.is_superuser)
        return data


class LoginResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    ownerKey = serializers.CharField()
    isStaff = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
    email = serializers.EmailField()
    first_name = serializers.CharField(allow_blank=True)
    last_name = serializers.CharField(allow_blank=True)
    ownerKey = serializers.CharField(source="cart_owner_key")
    is_staff = serializers.BooleanField()
    last_login = serializers.DateTimeField(allow_null=True)


class LogoutRequestSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
