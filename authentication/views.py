"""
Account endpoints: sign-up, sign-in and the signed-in customer's profile.

Sign-up and sign-in hand back a JWT pair; every other endpoint of the API
expects ``Authorization: Bearer <access>``.
"""

from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from .audit import log_audit_event
from .serializers import LoginSerializer, ProfileUpdateSerializer, UserRegistrationSerializer, UserSerializer


def token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def account_response(user, message, status_code=status.HTTP_200_OK):
    return Response(
        {"message": message, "user": UserSerializer(user).data, "tokens": token_pair(user)},
        status=status_code,
    )


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="10/m", method="POST")
def register_user(request):
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    log_audit_event(request, "REGISTER", "USER", user.pk, "SUCCESS", user=user)
    return account_response(user, "Registered successfully", status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate="10/m", method="POST")
def login_user(request):
    serializer = LoginSerializer(data=request.data, context={"request": request})
    serializer.is_valid(raise_exception=True)
    user = serializer.validated_data["user"]
    log_audit_event(request, "LOGIN", "USER", user.pk, "SUCCESS", user=user)
    return account_response(user, "Login successful")


@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
def me(request):
    """The caller's account; PATCH updates the saved contact and address details."""
    if request.method == "PATCH":
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        log_audit_event(request, "UPDATE", "USER", request.user.pk, "SUCCESS", {"fields": sorted(serializer.validated_data)})
    return Response(UserSerializer(request.user).data)
