from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.api.schemas import ErrorResponseSerializer
from apps.api.utils import service_error_response
from apps.common import get_logger
from .container import build_session_service
from .serializers import (
    AccountTokenObtainPairSerializer,
    DetailResponseSerializer,
    LoginResponseSerializer,
    LogoutRequestSerializer,
    MeResponseSerializer,
)

logger = get_logger(__name__).bind(component="auth", layer="view")


@extend_schema(
    tags=["Auth"],
    summary="Login (JWT obtain pair)",
    responses={200: LoginResponseSerializer, 401: OpenApiResponse(response=ErrorResponseSerializer)},
)
class LoginView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = AccountTokenObtainPairSerializer


@extend_schema(tags=["Auth"], summary="Refresh JWT")
class RefreshView(TokenRefreshView):
    permission_classes = [AllowAny]


@extend_schema(
    tags=["Auth"], summary="Get current user", responses={200: MeResponseSerializer}
)
class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(MeResponseSerializer(request.user).data)


@extend_schema(tags=["Auth"])
class LogoutView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_session_service()
    log = logger.bind(view="LogoutView")

    @extend_schema(
        summary="Logout (blacklist refresh)",
        request=LogoutRequestSerializer,
        responses={
            200: DetailResponseSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        error = self.service.logout(
            request.data.get("refresh"), getattr(request.user, "id", None)
        )
        if error:
            return service_error_response(error)
        return Response({"detail": "Logged out"}, status=status.HTTP_200_OK)
